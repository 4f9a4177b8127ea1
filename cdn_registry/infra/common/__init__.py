"""Common infrastructure utilities."""
from cdn_registry.infra.common.config import load_app_config, load_sources, parse_source
from cdn_registry.infra.common.paths import PublicPathBuilder
from cdn_registry.infra.common.clock import Clock, SystemClock, FixedClock, get_clock, set_clock
from cdn_registry.infra.common.logger import setup_logging, get_logger
from cdn_registry.infra.common.errors import (
    RegistryError,
    ConfigError,
    UpstreamError,
    ArtifactMatchError,
    BuildError,
    StorageError,
    PublishConflictError,
)
from cdn_registry.infra.common.hash_utils import compute_sri, compute_file_entry, compute_sri_map

__all__ = [
    "load_app_config",
    "load_sources",
    "parse_source",
    "PublicPathBuilder",
    "Clock",
    "SystemClock",
    "FixedClock",
    "get_clock",
    "set_clock",
    "setup_logging",
    "get_logger",
    "RegistryError",
    "ConfigError",
    "UpstreamError",
    "ArtifactMatchError",
    "BuildError",
    "StorageError",
    "PublishConflictError",
    "compute_sri",
    "compute_file_entry",
    "compute_sri_map",
]
