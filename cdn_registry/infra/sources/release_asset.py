"""Release-asset source: the host's latest release, published to ``@latest``."""
from typing import Any

from cdn_registry.domain.entities.artifact import Artifact, Candidate, Resolution
from cdn_registry.domain.entities.source_config import SourceConfig
from cdn_registry.domain.entities.state import SyncState
from cdn_registry.domain.services.versioning import detect_channel, strip_version_prefix
from cdn_registry.domain.sources.base import SourceAdapter
from cdn_registry.infra.common.errors import ArtifactMatchError, ConfigError, UpstreamError
from cdn_registry.infra.common.logger import get_logger
from cdn_registry.infra.sources.collect import asset_names, fetch_assets, match_assets
from cdn_registry.infra.sources.registry import register_adapter

logger = get_logger(__name__)


def release_identity(host: str, repo: str, tag: str) -> str:
    """Idempotency identity of a release-based channel target."""
    return f"{host}:{repo}@{tag}"


def release_provenance(repo: str, release: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "github-release",
        "repo": repo,
        "tag": release.get("tag_name") or release.get("name"),
        "release_html_url": release.get("html_url"),
    }


@register_adapter
class ReleaseAssetAdapter(SourceAdapter):
    """Publishes the assets of the host-defined latest release."""
    
    id = "release-asset"
    aliases = ("github-release-asset",)
    
    def validate(self, source: SourceConfig) -> None:
        if not source.repo:
            raise ConfigError(f"{source.package}: 'repo' is required for {self.id}")
        if not source.asset_regex:
            raise ConfigError(f"{source.package}: 'asset_regex' is required for {self.id}")
    
    def resolve(self, source: SourceConfig, state: SyncState) -> Resolution:
        client = self.context.client
        resolution = Resolution()
        
        try:
            release = client.get_latest_release(source.repo)
        except UpstreamError as e:
            resolution.errors["latest"] = str(e)
            return resolution
        
        tag = (release or {}).get("tag_name") or (release or {}).get("name")
        if not tag:
            resolution.errors["latest"] = f"No usable latest release tag for {source.repo}"
            return resolution
        
        version = strip_version_prefix(tag)
        candidate = Candidate(
            target="latest",
            pointer="@latest",
            identity=release_identity(client.host, source.repo, tag),
            ref=tag,
            version=version,
            channel=detect_channel(version, source.channel),
            upstream=release_provenance(source.repo, release),
            release=release,
        )
        
        if state.prior_identity(source.package, "latest") == candidate.identity:
            resolution.unchanged.append(candidate)
        else:
            resolution.candidates.append(candidate)
        return resolution
    
    def materialize(self, source: SourceConfig, candidate: Candidate) -> list[Artifact]:
        assets = match_assets(candidate.release or {}, source.asset_regex)
        if not assets:
            raise ArtifactMatchError(
                f"No asset of release {candidate.ref} matches asset_regex {source.asset_regex!r}; "
                f"release assets: {asset_names(candidate.release or {})}"
            )
        logger.info("Release %s: %d matching assets", candidate.ref, len(assets))
        return fetch_assets(self.context.client, assets, source.extract)
