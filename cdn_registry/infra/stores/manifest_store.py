"""Version and pointer directory operations."""
from typing import Optional

from cdn_registry.domain.entities.artifact import Artifact
from cdn_registry.domain.entities.manifest import VersionManifest
from cdn_registry.infra.stores.base import BaseStore


class ManifestStore(BaseStore):
    """Store for immutable version directories and the pointers mirroring them."""
    
    def write_version_dir(self, package: str, version: str, artifacts: list[Artifact]) -> str:
        """
        Write artifact bytes into a fresh, fully cleared version directory.
        
        Returns:
            Version directory key
        """
        version_dir = self.paths.version_dir(package, version)
        self.storage.reset_dir(version_dir)
        for artifact in artifacts:
            self.storage.put_object(f"{version_dir}/{artifact.name}", artifact.content)
        return version_dir
    
    def write_manifest(self, directory: str, manifest: VersionManifest) -> None:
        """Write ``manifest.json`` into a version or pointer directory."""
        self._write_json(self.paths.manifest_key(directory), manifest.to_json_dict())
    
    def read_manifest(self, directory: str) -> Optional[dict]:
        """Read ``manifest.json`` of a version or pointer directory."""
        return self._read_json(self.paths.manifest_key(directory))
    
    def replace_pointer(self, package: str, pointer: str, source_dir: str, manifest: VersionManifest) -> str:
        """
        Repoint a channel pointer or alias to a version directory.
        
        The pointer is torn down completely, repopulated with copies of the
        listed files and the manifest is written last, so readers that read
        the manifest last always see a consistent file set.
        
        Returns:
            Pointer directory key
        """
        pointer_dir = self.paths.pointer_dir(package, pointer)
        self.storage.reset_dir(pointer_dir)
        for name in manifest.files:
            self.storage.copy_object(f"{source_dir}/{name}", f"{pointer_dir}/{name}")
        self.write_manifest(pointer_dir, manifest)
        return pointer_dir
