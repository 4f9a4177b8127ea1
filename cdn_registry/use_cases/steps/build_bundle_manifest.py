"""Build bundle manifest step."""
from typing import Any

from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common import get_logger

logger = get_logger(__name__)


def build_bundle_manifest(catalog: PublicCatalog, base_url: str, built_at: str) -> dict[str, Any]:
    """
    Flatten the global index and every version manifest into one document.
    
    Always rebuilt from scratch. Versions whose manifest cannot be read are
    left out.
    
    Args:
        catalog: Public catalog instance
        base_url: Optional absolute CDN base URL
        built_at: Run timestamp
        
    Returns:
        The bundle manifest that was written
    """
    global_index = catalog.read_global_index()
    bundle: dict[str, Any] = {
        "generated_at": built_at,
        "base_url": base_url or "",
        "packages": {},
    }
    
    for package, summary in global_index.packages.items():
        package_out: dict[str, Any] = {"channels": summary.model_dump(mode="json"), "versions": {}}
        
        for entry in catalog.read_versions(package).versions:
            manifest = catalog.read_version_manifest(package, entry.version)
            if not manifest:
                logger.warning("Bundle: missing manifest for %s %s", package, entry.version)
                continue
            
            upstream = manifest.get("upstream") or None
            files = {
                name: {
                    "url": catalog.paths.file_url(package, entry.version, name),
                    "integrity": meta.get("integrity"),
                    "bytes": meta.get("bytes"),
                }
                for name, meta in (manifest.get("files") or {}).items()
            }
            package_out["versions"][entry.version] = {
                "channel": manifest.get("channel") or entry.channel,
                "built_at": manifest.get("built_at") or entry.built_at,
                "commit": (upstream or {}).get("commit"),
                "upstream": upstream,
                "files": files,
            }
        
        bundle["packages"][package] = package_out
    
    catalog.write_bundle_manifest(bundle)
    logger.info("Bundle manifest rebuilt: %d packages", len(bundle["packages"]))
    return bundle
