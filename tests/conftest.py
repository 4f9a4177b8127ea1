"""Shared fixtures: in-memory upstream host, frozen clock, zip builder."""
import io
import zipfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from cdn_registry.domain.entities.app_config import AppConfig
from cdn_registry.infra.build.runner import CommandResult, CommandRunner
from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common.clock import FixedClock, set_clock
from cdn_registry.infra.common.errors import UpstreamError
from cdn_registry.infra.sources import AdapterContext


class FakeHost:
    """In-memory stand-in for GitHubClient."""
    
    host = "github"
    
    def __init__(self):
        self.releases: dict[str, list[dict]] = {}
        self.latest: dict[str, dict] = {}
        self.tags: dict[str, list[dict]] = {}
        self.commits: dict[tuple[str, str], str] = {}
        self.blobs: dict[str, bytes] = {}
        self.downloads: list[str] = []
        self.failing: set[str] = set()
    
    def add_release(self, repo, tag, assets=None, prerelease=False, draft=False, make_latest=None):
        """Add a release newest-first; non-prerelease releases become host-latest by default."""
        release = {
            "tag_name": tag,
            "name": tag,
            "draft": draft,
            "prerelease": prerelease,
            "html_url": f"https://github.test/{repo}/releases/tag/{tag}",
            "zipball_url": f"https://api.test/repos/{repo}/zipball/{tag}",
            "assets": [],
        }
        for name, content in (assets or {}).items():
            url = f"https://github.test/{repo}/releases/download/{tag}/{name}"
            self.blobs[url] = content
            release["assets"].append({"name": name, "browser_download_url": url})
        self.releases.setdefault(repo, []).insert(0, release)
        if make_latest or (make_latest is None and not prerelease and not draft):
            self.latest[repo] = release
        return release
    
    def add_tag(self, repo, name, sha):
        self.tags.setdefault(repo, []).insert(0, {"name": name, "commit": {"sha": sha}})
        self.commits[(repo, name)] = sha
    
    def set_file(self, repo, sha, path, content):
        self.blobs[self.raw_file_url(repo, sha, path)] = content
    
    def get_latest_release(self, repo):
        if repo in self.failing:
            raise UpstreamError(f"GET latest for {repo} returned HTTP 502")
        return self.latest.get(repo)
    
    def list_releases(self, repo):
        return list(self.releases.get(repo, []))
    
    def list_tags(self, repo):
        return list(self.tags.get(repo, []))
    
    def resolve_commit(self, repo, ref):
        sha = self.commits.get((repo, ref))
        if not sha:
            raise UpstreamError(f"Ref {ref!r} does not resolve to a commit in {repo}")
        return sha
    
    def archive_url(self, repo, ref):
        return f"https://api.test/repos/{repo}/zipball/{ref}"
    
    def raw_file_url(self, repo, sha, path):
        return f"https://raw.test/{repo}/{sha}/{path}"
    
    def download(self, url):
        self.downloads.append(url)
        if url not in self.blobs:
            raise UpstreamError(f"Download {url} returned HTTP 404")
        return self.blobs[url]


def make_zip(entries: dict[str, bytes]) -> bytes:
    """Build a zip archive in memory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def snapshot(directory: Path) -> dict[str, bytes]:
    """All files under a directory, keyed by relative path."""
    directory = Path(directory)
    return {
        p.relative_to(directory).as_posix(): p.read_bytes()
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }


class TickingClock(FixedClock):
    """Frozen clock advanced one hour per ``tick()``."""
    
    def tick(self, hours: int = 1) -> None:
        self.instant = self.instant + timedelta(hours=hours)


@pytest.fixture
def clock():
    """Install a frozen clock for the test."""
    frozen = TickingClock(datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))
    set_clock(frozen)
    yield frozen
    set_clock(None)


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def public_dir(tmp_path):
    path = tmp_path / "public"
    path.mkdir()
    return path


@pytest.fixture
def catalog(public_dir):
    return PublicCatalog.at(public_dir)


@pytest.fixture
def app_config(tmp_path, public_dir):
    return AppConfig(
        public_dir=str(public_dir),
        sources_path=str(tmp_path / "external-sources.json"),
        work_dir=str(tmp_path / "work"),
        ui_dir=str(tmp_path / "pages"),
    )


class RecordingRunner(CommandRunner):
    """Command runner that records calls and writes scripted files instead of running anything."""
    
    def __init__(self, writes=None, fail=None):
        """
        Args:
            writes: Command to ``{relative path: bytes}`` created in cwd when it runs
            fail: Command that exits non-zero
        """
        self.writes = writes or {}
        self.fail = fail
        self.calls: list[tuple[str, Path, dict, float]] = []
    
    def run(self, command, cwd, env=None, timeout=None):
        self.calls.append((command, Path(cwd), env, timeout))
        if command == self.fail:
            return CommandResult(command=command, returncode=2, output="npm ERR! missing script\nnpm ERR! boom")
        for name, content in self.writes.get(command, {}).items():
            target = Path(cwd) / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        return CommandResult(command=command, returncode=0, output="ok")


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def context(host, tmp_path, runner):
    """Adapter context over the fake host."""
    return AdapterContext(client=host, work_dir=tmp_path / "work", runner=runner)
