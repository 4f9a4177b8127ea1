"""Upstream source adapters (importing this package registers them)."""
from cdn_registry.infra.sources.registry import ADAPTERS, AdapterContext, get_adapter, register_adapter
from cdn_registry.infra.sources.release_asset import ReleaseAssetAdapter
from cdn_registry.infra.sources.release_assets_semver import ReleaseAssetsSemverAdapter
from cdn_registry.infra.sources.raw_file import RawFileAdapter

__all__ = [
    "ADAPTERS",
    "AdapterContext",
    "get_adapter",
    "register_adapter",
    "ReleaseAssetAdapter",
    "ReleaseAssetsSemverAdapter",
    "RawFileAdapter",
]
