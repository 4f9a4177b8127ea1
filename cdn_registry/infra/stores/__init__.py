"""Public directory stores."""
from cdn_registry.infra.stores.base import BaseStore
from cdn_registry.infra.stores.manifest_store import ManifestStore
from cdn_registry.infra.stores.index_store import IndexStore
from cdn_registry.infra.stores.state_store import StateStore

__all__ = [
    "BaseStore",
    "ManifestStore",
    "IndexStore",
    "StateStore",
]
