"""Version publisher with pointer repointing."""
from typing import Any, Optional

from pydantic import BaseModel, Field

from cdn_registry.domain.entities.artifact import Artifact
from cdn_registry.domain.entities.manifest import Channel, VersionManifest
from cdn_registry.domain.services.versioning import alias_names
from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common import ArtifactMatchError, PublishConflictError, get_logger
from cdn_registry.use_cases.steps.publish.manifest_builder import ManifestBuilder

logger = get_logger(__name__)


class PublishResult(BaseModel):
    """What a publish wrote."""
    manifest: VersionManifest
    version_dir: str
    pointers: list[str] = Field(default_factory=list)


class VersionPublisher:
    """Writes immutable version directories and repoints channel pointers."""
    
    def __init__(self, catalog: PublicCatalog, manifest_builder: ManifestBuilder | None = None):
        """
        Initialize version publisher.
        
        Args:
            catalog: Public catalog instance
            manifest_builder: Manifest builder instance (defaults to new instance)
        """
        self.catalog = catalog
        self.manifest_builder = manifest_builder or ManifestBuilder()
    
    def publish(
        self,
        package: str,
        version: str,
        channel: Optional[Channel],
        artifacts: list[Artifact],
        upstream: dict[str, Any],
        meta: Optional[dict[str, Any]] = None,
        pointer: Optional[str] = None,
        built_at: Optional[str] = None,
    ) -> PublishResult:
        """
        Publish one version.
        
        Writes the version directory and its manifest, then fully rebuilds the
        requested pointer. Stable versions also rebuild their ``v<major>`` and
        ``v<major>.<minor>`` aliases, which therefore track the most recently
        published stable version rather than the highest one.
        
        Args:
            package: Package name
            version: Version id without leading ``v``
            channel: ``stable``, ``beta`` or None
            artifacts: Files to publish
            upstream: Provenance record
            meta: Optional descriptive block
            pointer: Pointer to repoint (``@latest``, ``@stable``, ``@beta``) or None
            built_at: Run timestamp
            
        Returns:
            Publish result
            
        Raises:
            ArtifactMatchError: If there is nothing to publish
            PublishConflictError: If an alias pointer already holds the version directory name
            StorageError: On disk failures
        """
        if not artifacts:
            raise ArtifactMatchError(f"Nothing to publish for {package} {version}")
        
        dir_name = self.catalog.paths.version_dir_name(version)
        if self.catalog.is_alias_dir(package, dir_name):
            raise PublishConflictError(
                f"{package}/{dir_name} is an alias pointer; refusing to publish version {version} over it"
            )
        
        manifest = self.manifest_builder.build_manifest(
            package=package,
            version=version,
            channel=channel,
            artifacts=artifacts,
            upstream=upstream,
            meta=meta,
            built_at=built_at,
        )
        
        version_dir = self.catalog.write_version_dir(package, version, artifacts)
        self.catalog.write_manifest(version_dir, manifest)
        logger.info("Wrote %s (%d files)", version_dir, len(manifest.files))
        
        result = PublishResult(manifest=manifest, version_dir=version_dir)
        
        targets = [pointer] if pointer else []
        if channel == "stable":
            for name in alias_names(version):
                if self.catalog.is_version_dir(package, name):
                    logger.warning("Alias %s/%s is a published version; leaving it untouched", package, name)
                    continue
                targets.append(name)
        
        for name in targets:
            result.pointers.append(self.catalog.replace_pointer(package, name, version_dir, manifest))
        
        if result.pointers:
            logger.info("Repointed %s -> %s", ", ".join(result.pointers), manifest.version)
        return result
