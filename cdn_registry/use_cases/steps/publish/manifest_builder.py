"""Manifest builder for version publishing."""
from typing import Any, Optional

from cdn_registry.domain.entities.artifact import Artifact
from cdn_registry.domain.entities.manifest import Channel, VersionManifest
from cdn_registry.infra.common import Clock, PublicPathBuilder, compute_file_entry


class ManifestBuilder:
    """Builds manifests for version publishing."""
    
    def __init__(self, clock: Clock | None = None, paths: PublicPathBuilder | None = None):
        """
        Initialize manifest builder.
        
        Args:
            clock: Clock instance (defaults to system clock)
            paths: Path builder instance (defaults to PublicPathBuilder)
        """
        from cdn_registry.infra.common import get_clock
        
        self.clock = clock or get_clock()
        self.paths = paths or PublicPathBuilder()
    
    def build_manifest(
        self,
        package: str,
        version: str,
        channel: Optional[Channel],
        artifacts: list[Artifact],
        upstream: dict[str, Any],
        meta: Optional[dict[str, Any]] = None,
        built_at: Optional[str] = None,
    ) -> VersionManifest:
        """
        Build manifest for a version.
        
        Args:
            package: Package name
            version: Version id (with or without leading ``v``)
            channel: ``stable``, ``beta`` or None
            artifacts: Files of the version
            upstream: Provenance record
            meta: Optional descriptive block
            built_at: Run timestamp (defaults to now)
            
        Returns:
            Manifest object
        """
        files = {
            artifact.name: compute_file_entry(artifact.content)
            for artifact in sorted(artifacts, key=lambda a: a.name)
        }
        
        return VersionManifest(
            package=package,
            version=self.paths.version_dir_name(version),
            channel=channel,
            built_at=built_at or self.clock.now_iso(),
            upstream=upstream,
            meta=meta,
            files=files,
        )
