"""Update per-package and global indexes step."""
from typing import Any, Optional

from cdn_registry.domain.entities.index import VersionEntry
from cdn_registry.domain.entities.manifest import Channel
from cdn_registry.domain.services.index_service import summarize, upsert_version
from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common import get_logger

logger = get_logger(__name__)


def record_publish(
    catalog: PublicCatalog,
    package: str,
    version: str,
    channel: Optional[Channel],
    built_at: str,
    meta: Optional[dict[str, Any]] = None,
) -> None:
    """
    Record a publish in ``versions.json`` and ``_index/index.json``.
    
    Args:
        catalog: Public catalog instance
        package: Package name
        version: Version with leading ``v``
        channel: ``stable``, ``beta`` or None
        built_at: Run timestamp
        meta: Package metadata; keeps the stored one when None
    """
    entry = VersionEntry(version=version, channel=channel, built_at=built_at)
    versions = upsert_version(catalog.read_versions(package), entry)
    catalog.write_versions(versions)
    
    global_index = catalog.read_global_index()
    global_index.generated_at = built_at
    global_index.packages[package] = summarize(versions, global_index.packages.get(package), meta)
    catalog.write_global_index(global_index)
    
    logger.info("Indexed %s %s (%d versions)", package, version, len(versions.versions))
