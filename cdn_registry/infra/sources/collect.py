"""Artifact collection shared by the source adapters."""
import posixpath
import re
from typing import Any, Iterable

from cdn_registry.domain.entities.artifact import Artifact
from cdn_registry.domain.entities.source_config import ExtractRule
from cdn_registry.infra.archive import is_zip, list_entries, read_entry, safe_output_name
from cdn_registry.infra.common.errors import ArtifactMatchError
from cdn_registry.infra.github.client import GitHubClient
from cdn_registry.infra.common.logger import get_logger

logger = get_logger(__name__)


def match_assets(release: dict[str, Any], asset_regex: str) -> list[dict[str, Any]]:
    """Release assets whose name matches the configured pattern."""
    regex = re.compile(asset_regex)
    return [a for a in release.get("assets") or [] if a.get("name") and regex.search(a["name"])]


def asset_names(release: dict[str, Any]) -> list[str]:
    return [a.get("name", "?") for a in release.get("assets") or []]


def _unique(artifacts: Iterable[Artifact]) -> list[Artifact]:
    seen: dict[str, Artifact] = {}
    for artifact in artifacts:
        if artifact.name in seen:
            raise ArtifactMatchError(f"Two files map to the same output name {artifact.name!r}")
        seen[artifact.name] = artifact
    return list(seen.values())


def extract_from_zip(name: str, content: bytes, rules: list[ExtractRule]) -> list[Artifact]:
    """
    Pick entries out of a zip asset.
    
    Each rule's regex is searched against every entry path; matched entries
    are published under the rule's ``rename`` template or their basename.
    An entry is taken by the first rule that matches it.
    
    Raises:
        ArtifactMatchError: If no entry matched any rule
    """
    artifacts = []
    entries = list_entries(content)
    for entry in entries:
        for rule in rules:
            match = re.search(rule.match, entry)
            if not match:
                continue
            output = match.expand(rule.rename) if rule.rename else posixpath.basename(entry)
            artifacts.append(Artifact(name=safe_output_name(output), content=read_entry(content, entry)))
            break
    if not artifacts:
        raise ArtifactMatchError(
            f"No entry of {name} matched extract rules {[r.match for r in rules]}; "
            f"archive holds {entries[:10]}"
        )
    return artifacts


def fetch_assets(
    client: GitHubClient,
    assets: list[dict[str, Any]],
    rules: list[ExtractRule],
) -> list[Artifact]:
    """Download matched release assets, extracting zip assets when rules are configured."""
    artifacts = []
    for asset in assets:
        content = client.download(asset["browser_download_url"])
        if rules and is_zip(asset["name"], content):
            artifacts.extend(extract_from_zip(asset["name"], content, rules))
        else:
            artifacts.append(Artifact(name=safe_output_name(asset["name"]), content=content))
    return _unique(artifacts)


def fetch_raw_files(client: GitHubClient, repo: str, sha: str, paths: list[str]) -> list[Artifact]:
    """Download explicit file paths from an exact commit, published under their basenames."""
    artifacts = []
    for path in paths:
        content = client.download(client.raw_file_url(repo, sha, path))
        artifacts.append(Artifact(name=safe_output_name(posixpath.basename(path)), content=content))
    return _unique(artifacts)
