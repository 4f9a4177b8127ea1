"""Raw-file source: explicit paths pinned to the commit a ref resolves to."""
from cdn_registry.domain.entities.artifact import Artifact, Candidate, Resolution
from cdn_registry.domain.entities.source_config import SourceConfig
from cdn_registry.domain.entities.state import SyncState
from cdn_registry.domain.sources.base import SourceAdapter
from cdn_registry.infra.common.errors import ConfigError, UpstreamError
from cdn_registry.infra.sources.collect import fetch_raw_files
from cdn_registry.infra.sources.registry import register_adapter

SHORT_SHA_LENGTH = 12


def commit_version(sha: str) -> str:
    """Immutable version id of a commit (``0.0.0-<sha12>``)."""
    return f"0.0.0-{sha[:SHORT_SHA_LENGTH]}"


@register_adapter
class RawFileAdapter(SourceAdapter):
    """Publishes files of a branch/tag as one immutable version per commit."""
    
    id = "raw-file"
    aliases = ("github-raw-file",)
    
    def validate(self, source: SourceConfig) -> None:
        if not source.repo:
            raise ConfigError(f"{source.package}: 'repo' is required for {self.id}")
        if not source.file_paths:
            raise ConfigError(f"{source.package}: 'path' or 'paths' is required for {self.id}")
    
    def resolve(self, source: SourceConfig, state: SyncState) -> Resolution:
        client = self.context.client
        ref = source.ref or "main"
        resolution = Resolution()
        
        try:
            sha = client.resolve_commit(source.repo, ref)
        except UpstreamError as e:
            resolution.errors["latest"] = str(e)
            return resolution
        
        upstream = {
            "type": "github-raw",
            "repo": source.repo,
            "ref": ref,
            "commit": sha,
            "paths": source.file_paths,
        }
        if len(source.file_paths) == 1:
            upstream["path"] = source.file_paths[0]
        
        candidate = Candidate(
            target="latest",
            pointer="@latest",
            identity=f"{client.host}:{source.repo}#{sha}",
            ref=sha,
            version=commit_version(sha),
            channel=source.channel,
            upstream=upstream,
        )
        if state.prior_identity(source.package, "latest") == candidate.identity:
            resolution.unchanged.append(candidate)
        else:
            resolution.candidates.append(candidate)
        return resolution
    
    def materialize(self, source: SourceConfig, candidate: Candidate) -> list[Artifact]:
        # fetch by sha, never by the moving ref
        return fetch_raw_files(self.context.client, source.repo, candidate.ref, source.file_paths)
