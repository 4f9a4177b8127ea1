"""Zip archive helpers for release assets and repository snapshots."""
import io
import zipfile
from pathlib import Path, PurePosixPath

from cdn_registry.infra.common.errors import ArtifactMatchError, BuildError


def is_zip(name: str, content: bytes) -> bool:
    """Check whether an asset is a zip archive (by name or magic bytes)."""
    return name.lower().endswith(".zip") or content[:4] == b"PK\x03\x04"


def _open(content: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(content))
    except zipfile.BadZipFile as e:
        raise ArtifactMatchError(f"Not a valid zip archive: {e}") from e


def list_entries(content: bytes) -> list[str]:
    """List file entry paths of a zip archive (directories excluded)."""
    with _open(content) as archive:
        return [info.filename for info in archive.infolist() if not info.is_dir()]


def read_entry(content: bytes, name: str) -> bytes:
    """Read one entry's bytes."""
    with _open(content) as archive:
        return archive.read(name)


def extract_all(content: bytes, dest: Path) -> Path:
    """
    Extract an archive into a scratch directory and locate its single top-level directory.
    
    Args:
        content: Zip archive bytes
        dest: Empty scratch directory
        
    Returns:
        The top-level directory (``dest`` itself when the archive has none or several)
        
    Raises:
        BuildError: If an entry would be written outside ``dest``
    """
    dest = Path(dest).resolve()
    with _open(content) as archive:
        for info in archive.infolist():
            target = (dest / info.filename).resolve()
            if target != dest and dest not in target.parents:
                raise BuildError(f"Archive entry escapes extraction dir: {info.filename}")
        archive.extractall(dest)
    
    roots = [p for p in dest.iterdir() if not p.name.startswith("__MACOSX")]
    if len(roots) == 1 and roots[0].is_dir():
        return roots[0]
    return dest


def safe_output_name(name: str) -> str:
    """Normalize an output name and refuse absolute paths or ``..`` components."""
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts or not path.parts:
        raise ArtifactMatchError(f"Unsafe output file name: {name!r}")
    return path.as_posix()
