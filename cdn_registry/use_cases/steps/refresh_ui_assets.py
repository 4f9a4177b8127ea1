"""Copy static UI assets into the public directory."""
from pathlib import Path

from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common import get_logger

logger = get_logger(__name__)


def refresh_ui_assets(catalog: PublicCatalog, ui_dir: str | Path, names: list[str]) -> list[str]:
    """
    Copy UI files verbatim into the public directory root.
    
    Returns:
        Names that were copied (missing sources are skipped)
    """
    copied = []
    for name in names:
        source = Path(ui_dir) / name
        if not source.is_file():
            continue
        catalog.storage.put_object(name, source.read_bytes())
        copied.append(name)
    if copied:
        logger.info("Refreshed UI assets: %s", ", ".join(copied))
    return copied
