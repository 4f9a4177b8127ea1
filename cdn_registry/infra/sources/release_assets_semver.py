"""Release-assets-semver source: independent ``@latest``, ``@stable`` and ``@beta`` targets."""
from typing import Any, Optional

from cdn_registry.domain.entities.artifact import Artifact, Candidate, Resolution
from cdn_registry.domain.entities.source_config import SourceConfig
from cdn_registry.domain.entities.state import SyncState
from cdn_registry.domain.services.versioning import (
    highest,
    is_prerelease,
    parse_version,
    strip_version_prefix,
)
from cdn_registry.domain.sources.base import SourceAdapter
from cdn_registry.infra.common.errors import ArtifactMatchError, ConfigError, UpstreamError
from cdn_registry.infra.common.logger import get_logger
from cdn_registry.infra.sources.collect import asset_names, fetch_assets, fetch_raw_files, match_assets
from cdn_registry.infra.sources.registry import register_adapter
from cdn_registry.infra.sources.release_asset import release_identity, release_provenance

logger = get_logger(__name__)

# stable and beta first, latest last: on a first run the version recorded last
# heads versions.json, matching what @latest points to
TARGET_ORDER = ("stable", "beta", "latest")


def _tag(release: dict[str, Any]) -> str:
    return release.get("tag_name") or release.get("name") or ""


def _is_prerelease_release(release: dict[str, Any]) -> bool:
    """Host prerelease flag or a pre-release component in the tag."""
    return bool(release.get("prerelease")) or is_prerelease(_tag(release))


def _tag_as_release(tag: dict[str, Any]) -> dict[str, Any]:
    """Tag listing entry shaped like a release without assets."""
    return {
        "tag_name": tag.get("name"),
        "prerelease": is_prerelease(tag.get("name") or ""),
        "assets": [],
        "commit": (tag.get("commit") or {}).get("sha"),
        "tag_only": True,
    }


@register_adapter
class ReleaseAssetsSemverAdapter(SourceAdapter):
    """
    Selects three targets from one release listing.
    
    ``@latest`` follows the host's own notion of latest release, ``@stable``
    the highest non-prerelease semantic version and ``@beta`` the highest
    prerelease. Each target has its own idempotency identity and is
    republished independently. When the repository has no releases, semver
    tags stand in for releases; they carry no assets, so they can only be
    published through a snapshot build or raw file paths.
    """
    
    id = "release-assets-semver"
    
    def __init__(self, context):
        super().__init__(context)
        self._materialized: dict[str, tuple[list[Artifact], dict[str, Any]]] = {}
    
    def validate(self, source: SourceConfig) -> None:
        if not source.repo:
            raise ConfigError(f"{source.package}: 'repo' is required for {self.id}")
        if not (source.asset_regex or source.build.enable or source.file_paths):
            raise ConfigError(
                f"{source.package}: {self.id} needs 'asset_regex', an enabled 'build' or raw 'paths'"
            )
    
    def resolve(self, source: SourceConfig, state: SyncState) -> Resolution:
        client = self.context.client
        releases = [r for r in client.list_releases(source.repo) if not r.get("draft") and _tag(r)]
        
        targets: dict[str, Optional[dict[str, Any]]] = {}
        errors: dict[str, str] = {}
        if releases:
            targets["stable"] = highest(
                (r for r in releases if not _is_prerelease_release(r)), _tag
            )
            targets["beta"] = highest(
                (r for r in releases if _is_prerelease_release(r)), _tag
            )
            try:
                targets["latest"] = client.get_latest_release(source.repo)
            except UpstreamError as e:
                errors["latest"] = str(e)
        else:
            tags = [_tag_as_release(t) for t in client.list_tags(source.repo) if t.get("name")]
            if not any(parse_version(_tag(t)) for t in tags):
                return Resolution(errors={"latest": f"No releases and no semver tags found in {source.repo}"})
            logger.info("%s has no releases, falling back to semver tags", source.repo)
            targets["stable"] = highest((t for t in tags if not t["prerelease"]), _tag)
            targets["beta"] = highest((t for t in tags if t["prerelease"]), _tag)
            targets["latest"] = highest(tags, _tag)
        
        resolution = Resolution(errors=errors)
        for target in TARGET_ORDER:
            release = targets.get(target)
            if target in errors:
                continue
            if not release or not _tag(release):
                resolution.notes[target] = f"no {target} release upstream"
                continue
            candidate = self._candidate(source, target, release)
            if state.prior_identity(source.package, target) == candidate.identity:
                resolution.unchanged.append(candidate)
            else:
                resolution.candidates.append(candidate)
        return resolution
    
    def _candidate(self, source: SourceConfig, target: str, release: dict[str, Any]) -> Candidate:
        tag = _tag(release)
        version = strip_version_prefix(tag)
        if release.get("tag_only"):
            upstream = {"type": "github-tag", "repo": source.repo, "tag": tag, "commit": release.get("commit")}
        else:
            upstream = release_provenance(source.repo, release)
        
        channel = source.channel or ("beta" if _is_prerelease_release(release) else "stable")
        
        return Candidate(
            target=target,
            pointer=f"@{target}",
            identity=release_identity(self.context.client.host, source.repo, tag),
            ref=tag,
            version=version,
            channel=channel,
            upstream=upstream,
            release=release,
        )
    
    def materialize(self, source: SourceConfig, candidate: Candidate) -> list[Artifact]:
        # latest usually coincides with stable; download once per tag
        if candidate.ref not in self._materialized:
            self._materialized[candidate.ref] = self._fetch(source, candidate)
        artifacts, provenance = self._materialized[candidate.ref]
        candidate.upstream.update(provenance)
        return artifacts
    
    def _fetch(self, source: SourceConfig, candidate: Candidate) -> tuple[list[Artifact], dict[str, Any]]:
        client = self.context.client
        release = candidate.release or {}
        tag = candidate.ref
        
        assets = match_assets(release, source.asset_regex) if source.asset_regex else []
        if assets:
            logger.info("Release %s: %d matching assets", tag, len(assets))
            return fetch_assets(client, assets, source.extract), {}
        
        if source.build.enable:
            archive_url = release.get("zipball_url") or client.archive_url(source.repo, tag)
            archive = client.download(archive_url)
            artifacts = self.context.build_step.run(
                source.package, tag, archive, source.build, fallback_regex=source.asset_regex
            )
            return artifacts, {"built_from": "source-snapshot"}
        
        if source.file_paths:
            sha = release.get("commit") or client.resolve_commit(source.repo, tag)
            artifacts = fetch_raw_files(client, source.repo, sha, source.file_paths)
            return artifacts, {"commit": sha, "paths": source.file_paths}
        
        if release.get("tag_only"):
            raise ArtifactMatchError(
                f"Tag {tag} has no release assets; enable 'build' or configure raw 'paths' "
                f"to publish from tags"
            )
        raise ArtifactMatchError(
            f"No asset of release {tag} matches asset_regex {source.asset_regex!r}; "
            f"release assets: {asset_names(release)}; enable 'build' to build from the source snapshot"
        )
