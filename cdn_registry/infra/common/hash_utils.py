"""Integrity digest utilities."""
import base64
import hashlib
from pathlib import Path

from cdn_registry.domain.entities.manifest import FileEntry


def compute_sri(content: bytes) -> str:
    """
    Compute Sub-Resource-Integrity string of file content.
    
    Args:
        content: File content bytes
        
    Returns:
        Integrity string of the form ``sha384-<base64>``
    """
    digest = hashlib.sha384(content).digest()
    return "sha384-" + base64.b64encode(digest).decode("ascii")


def compute_file_entry(content: bytes) -> FileEntry:
    """Compute integrity and byte length of file content."""
    return FileEntry(integrity=compute_sri(content), bytes=len(content))


def compute_sri_map(directory: Path) -> dict[str, FileEntry]:
    """
    Produce integrity map for the regular files directly inside a directory.
    
    Args:
        directory: Directory to scan (not recursive)
        
    Returns:
        Mapping of file name to its integrity entry, sorted by name
    """
    entries = {}
    for path in sorted(Path(directory).iterdir()):
        if not path.is_file():
            continue
        entries[path.name] = compute_file_entry(path.read_bytes())
    return entries
