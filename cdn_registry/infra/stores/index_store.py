"""Version index, global index and bundle manifest operations."""
from typing import Any

from pydantic import ValidationError

from cdn_registry.domain.entities.index import GlobalIndex, VersionIndex
from cdn_registry.infra.stores.base import BaseStore, logger


class IndexStore(BaseStore):
    """Store for ``versions.json``, ``_index/index.json`` and the bundle manifest."""
    
    def read_versions(self, package: str) -> VersionIndex:
        """Read per-package version index (empty when missing)."""
        data = self._read_json(self.paths.versions_key(package))
        if not isinstance(data, dict):
            return VersionIndex(package=package)
        try:
            return VersionIndex.model_validate({"package": package, "versions": data.get("versions") or []})
        except ValidationError as e:
            logger.warning("Rebuilding unreadable versions.json for %s: %s", package, e)
            return VersionIndex(package=package)
    
    def write_versions(self, index: VersionIndex) -> None:
        """Write per-package version index."""
        self._write_json(self.paths.versions_key(index.package), index.model_dump(mode="json"))
    
    def read_global_index(self) -> GlobalIndex:
        """Read global package index (empty when missing)."""
        data = self._read_json(self.paths.global_index_key())
        if not isinstance(data, dict):
            return GlobalIndex()
        try:
            return GlobalIndex.model_validate(data)
        except ValidationError as e:
            logger.warning("Rebuilding unreadable global index: %s", e)
            return GlobalIndex()
    
    def write_global_index(self, index: GlobalIndex) -> None:
        """Write global package index."""
        self._write_json(self.paths.global_index_key(), index.model_dump(mode="json"))
    
    def write_bundle_manifest(self, bundle: dict[str, Any]) -> None:
        """Write bundle manifest."""
        self._write_json(self.paths.bundle_manifest_key(), bundle)
    
    def read_bundle_manifest(self) -> dict[str, Any] | None:
        return self._read_json(self.paths.bundle_manifest_key())
