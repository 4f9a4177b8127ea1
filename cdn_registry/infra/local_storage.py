"""Local filesystem storage operations for the public directory."""
import shutil
from pathlib import Path

from cdn_registry.infra.common.errors import StorageError


class LocalStorage:
    """Storage adapter rooted at the public directory; keys are ``/``-separated relative paths."""
    
    def __init__(self, root: str | Path):
        """
        Initialize local storage.
        
        Args:
            root: Public directory (created on first write)
        """
        self.root = Path(root).resolve()
    
    def path(self, key: str) -> Path:
        """Resolve a key, refusing anything that escapes the root."""
        target = (self.root / key).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(f"Path escapes public dir: {key}")
        return target
    
    def get_object(self, key: str) -> bytes:
        """Read file bytes (raises FileNotFoundError when missing)."""
        return self.path(key).read_bytes()
    
    def put_object(self, key: str, body: bytes) -> None:
        """Write file bytes, creating parent directories."""
        target = self.path(key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(body)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
    
    def copy_object(self, src_key: str, dst_key: str) -> None:
        """Copy one file."""
        dst = self.path(dst_key)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.path(src_key), dst)
        except OSError as e:
            raise StorageError(f"Failed to copy {src_key} -> {dst_key}: {e}") from e
    
    def reset_dir(self, key: str) -> None:
        """Remove a directory tree completely and recreate it empty."""
        target = self.path(key)
        try:
            if target.exists():
                shutil.rmtree(target)
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to reset {key}: {e}") from e
    
    def list_objects(self, prefix: str) -> list[str]:
        """List file keys under a directory, recursively, sorted."""
        base = self.path(prefix)
        if not base.is_dir():
            return []
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in base.rglob("*")
            if p.is_file()
        )
