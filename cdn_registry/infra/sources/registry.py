"""Source adapter registry."""
from pathlib import Path
from typing import Optional, Type

from cdn_registry.domain.sources.base import SourceAdapter
from cdn_registry.infra.build.build_step import BuildStep
from cdn_registry.infra.build.runner import CommandRunner, SubprocessRunner
from cdn_registry.infra.common.errors import ConfigError
from cdn_registry.infra.github.client import GitHubClient


# In-memory registry
ADAPTERS: dict[str, Type[SourceAdapter]] = {}


class AdapterContext:
    """Collaborators shared by the adapters of one run."""
    
    def __init__(
        self,
        client: GitHubClient,
        work_dir: str | Path = ".tmp/external",
        runner: Optional[CommandRunner] = None,
    ):
        self.client = client
        self.work_dir = Path(work_dir)
        self.build_step = BuildStep(runner or SubprocessRunner(), self.work_dir)


def register_adapter(adapter_cls: Type[SourceAdapter]) -> Type[SourceAdapter]:
    """Register an adapter class under its id and aliases."""
    for name in (adapter_cls.id, *adapter_cls.aliases):
        ADAPTERS[name] = adapter_cls
    return adapter_cls


def get_adapter(source_type: Optional[str], context: AdapterContext) -> SourceAdapter:
    """
    Get a fresh adapter for a source type.
    
    Args:
        source_type: ``type`` field of the source configuration
        context: Shared collaborators
        
    Returns:
        Adapter instance (one per source, so per-source caches never leak)
        
    Raises:
        ConfigError: If the type is missing or unknown
    """
    if not source_type:
        raise ConfigError("Source type is required")
    
    if source_type not in ADAPTERS:
        known = ", ".join(sorted(ADAPTERS))
        raise ConfigError(f"Unknown source type '{source_type}' (known: {known})")
    
    return ADAPTERS[source_type](context)
