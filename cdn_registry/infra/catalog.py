"""Public directory catalog facade that composes specialized stores."""
from pathlib import Path

from cdn_registry.domain.entities.manifest import VersionManifest
from cdn_registry.domain.entities.artifact import Artifact
from cdn_registry.infra.common.hash_utils import compute_sri
from cdn_registry.infra.local_storage import LocalStorage
from cdn_registry.infra.stores import IndexStore, ManifestStore, StateStore


class PublicCatalog:
    """
    Public directory catalog facade.
    
    Provides one interface to the published layout while delegating to
    specialized stores.
    """
    
    def __init__(self, storage: LocalStorage):
        """Initialize catalog with specialized stores."""
        self.storage = storage
        self._manifest_store = ManifestStore(storage)
        self._index_store = IndexStore(storage)
        self._state_store = StateStore(storage)
    
    @classmethod
    def at(cls, public_dir: str | Path) -> "PublicCatalog":
        return cls(LocalStorage(public_dir))
    
    @property
    def paths(self):
        return self._manifest_store.paths
    
    # ============================================================================
    # Version and pointer directories (delegated to ManifestStore)
    # ============================================================================
    
    def write_version_dir(self, package: str, version: str, artifacts: list[Artifact]) -> str:
        return self._manifest_store.write_version_dir(package, version, artifacts)
    
    def write_manifest(self, directory: str, manifest: VersionManifest) -> None:
        return self._manifest_store.write_manifest(directory, manifest)
    
    def read_manifest(self, directory: str):
        return self._manifest_store.read_manifest(directory)
    
    def read_version_manifest(self, package: str, version: str):
        return self._manifest_store.read_manifest(self.paths.version_dir(package, version))
    
    def read_pointer_manifest(self, package: str, pointer: str):
        return self._manifest_store.read_manifest(self.paths.pointer_dir(package, pointer))
    
    def replace_pointer(self, package: str, pointer: str, source_dir: str, manifest: VersionManifest) -> str:
        return self._manifest_store.replace_pointer(package, pointer, source_dir, manifest)
    
    def verify_pointer(self, package: str, pointer: str) -> list[str]:
        """
        Check a pointer's files against its manifest.
        
        Returns:
            Problems found (empty when the pointer is consistent)
        """
        pointer_dir = self.paths.pointer_dir(package, pointer)
        manifest = self.read_pointer_manifest(package, pointer)
        if manifest is None:
            return [f"{pointer_dir}: manifest missing"]
        
        problems = []
        for name, entry in (manifest.get("files") or {}).items():
            key = f"{pointer_dir}/{name}"
            try:
                content = self.storage.get_object(key)
            except FileNotFoundError:
                problems.append(f"{key}: missing")
                continue
            if compute_sri(content) != entry.get("integrity"):
                problems.append(f"{key}: integrity mismatch")
            elif len(content) != entry.get("bytes"):
                problems.append(f"{key}: size mismatch")
        
        listed = {f"{pointer_dir}/{name}" for name in manifest.get("files") or {}}
        listed.add(self.paths.manifest_key(pointer_dir))
        for key in self.storage.list_objects(pointer_dir):
            if key not in listed:
                problems.append(f"{key}: not in manifest")
        return problems
    
    def is_version_dir(self, package: str, name: str) -> bool:
        """
        Check whether a directory holds an immutable version.
        
        A directory is a version when the version index lists it or its
        manifest names itself; alias pointers carry the manifest of the
        version they mirror.
        """
        if name in {v.version for v in self.read_versions(package).versions}:
            return True
        manifest = self.read_manifest(self.paths.pointer_dir(package, name))
        return bool(manifest) and manifest.get("version") == name
    
    def is_alias_dir(self, package: str, name: str) -> bool:
        """Check whether a directory is an alias pointer mirroring another version."""
        if name in {v.version for v in self.read_versions(package).versions}:
            return False
        manifest = self.read_manifest(self.paths.pointer_dir(package, name))
        return bool(manifest) and manifest.get("version") != name
    
    def list_pointers(self, package: str) -> list[str]:
        """List pointer and alias directories present for a package."""
        package_dir = self.storage.path(self.paths.package_dir(package))
        if not package_dir.is_dir():
            return []
        names = []
        for p in package_dir.iterdir():
            if not p.is_dir():
                continue
            if p.name.startswith("@") or (p.name.startswith("v") and not self.is_version_dir(package, p.name)):
                names.append(p.name)
        return sorted(names)
    
    # ============================================================================
    # Indexes (delegated to IndexStore)
    # ============================================================================
    
    def read_versions(self, package: str):
        return self._index_store.read_versions(package)
    
    def write_versions(self, index) -> None:
        return self._index_store.write_versions(index)
    
    def read_global_index(self):
        return self._index_store.read_global_index()
    
    def write_global_index(self, index) -> None:
        return self._index_store.write_global_index(index)
    
    def write_bundle_manifest(self, bundle: dict) -> None:
        return self._index_store.write_bundle_manifest(bundle)
    
    def read_bundle_manifest(self):
        return self._index_store.read_bundle_manifest()
    
    # ============================================================================
    # State and report (delegated to StateStore)
    # ============================================================================
    
    def load_state(self):
        return self._state_store.load_state()
    
    def save_state(self, state) -> None:
        return self._state_store.save_state(state)
    
    def write_report(self, report) -> None:
        return self._state_store.write_report(report)
    
    def read_report(self):
        return self._state_store.read_report()
