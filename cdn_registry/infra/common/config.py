"""Centralized configuration loading."""
import importlib
import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from cdn_registry.domain.entities.app_config import AppConfig
from cdn_registry.domain.entities.source_config import SourceConfig
from cdn_registry.infra.common.errors import ConfigError

ENVIRONMENTS = ("local", "staging", "production")


def _load_env_file() -> None:
    """Load environment variables from .env file if it exists."""
    if os.getenv("GITHUB_ACTIONS") == "true":
        return
    
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        load_dotenv(override=False)


def load_app_config(env: Optional[str] = None) -> AppConfig:
    """
    Load application configuration for environment.
    
    Args:
        env: Environment name (local, staging, production). 
             If None, reads from ENV environment variable.
        
    Returns:
        AppConfig instance
        
    Raises:
        ConfigError: If config module not found or invalid
    """
    _load_env_file()
    
    if env is None:
        env = os.getenv("ENV", "local")
    
    if env not in ENVIRONMENTS:
        raise ConfigError(f"Invalid environment: {env}. Must be one of: {', '.join(ENVIRONMENTS)}")
    
    module_name = f"config.appconfig.{env}"
    try:
        config_module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Config module not found: {module_name}") from e
    return config_module.config


def load_sources(path: str | Path) -> list[dict[str, Any]]:
    """
    Load the raw source list.
    
    The document is ``{"sources": [...]}`` (a bare list is accepted too), read
    as JSON for ``.json`` files and YAML for ``.yml``/``.yaml``. Entries are
    returned unvalidated so each one can fail on its own.
    
    Raises:
        ConfigError: If the file is missing or not a source list
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"Sources file not found: {path}") from e
    
    try:
        if path.suffix in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid sources file {path}: {e}") from e
    
    if isinstance(data, dict):
        data = data.get("sources") or []
    if not isinstance(data, list):
        raise ConfigError(f"Sources file {path} must hold a 'sources' list")
    return data


def parse_source(raw: Any) -> SourceConfig:
    """
    Validate one source entry.
    
    Raises:
        ConfigError: If required fields are missing or malformed
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"Source entry must be an object, got {type(raw).__name__}")
    try:
        return SourceConfig.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'source'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid source config: {problems}") from e
