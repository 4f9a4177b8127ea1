"""Version index maintenance rules."""
from typing import Any, Optional

from cdn_registry.domain.entities.index import PackageSummary, VersionEntry, VersionIndex


def upsert_version(index: VersionIndex, entry: VersionEntry) -> VersionIndex:
    """
    Insert or replace an entry by version and re-sort newest ``built_at`` first.
    
    The new entry goes in front before the (stable) sort, so among entries
    with equal ``built_at`` the most recently recorded one ranks first.
    
    Args:
        index: Current version index
        entry: Entry to upsert
        
    Returns:
        New version index
    """
    versions = [entry] + [v for v in index.versions if v.version != entry.version]
    versions.sort(key=lambda v: v.built_at or "", reverse=True)
    return VersionIndex(package=index.package, versions=versions)


def summarize(
    index: VersionIndex,
    previous: Optional[PackageSummary] = None,
    meta: Optional[dict[str, Any]] = None,
) -> PackageSummary:
    """
    Compute the global index snapshot for a package.
    
    Args:
        index: Sorted version index
        previous: Previously stored summary (for ``meta`` retention)
        meta: Newly provided metadata, merged only when given
        
    Returns:
        Package summary
    """
    last_stable = next((v for v in index.versions if v.channel == "stable"), None)
    last_beta = next((v for v in index.versions if v.channel == "beta"), None)
    last_latest = index.versions[0] if index.versions else None
    
    return PackageSummary(
        last_stable=last_stable,
        last_beta=last_beta,
        last_latest=last_latest,
        meta=meta or (previous.meta if previous else None),
    )
