"""End-to-end tests of the sync run over a fake upstream host."""
import json

import pytest

from cdn_registry.domain.entities.run import Status
from cdn_registry.infra.common import compute_sri
from cdn_registry.use_cases.run_sync import run_sync

from conftest import snapshot

FOO = {"package": "foo", "type": "release-asset", "repo": "x/y", "asset_regex": r"\.js$"}
LIB = {"package": "lib", "type": "release-assets-semver", "repo": "x/lib", "asset_regex": r"\.js$"}
RAW = {"package": "snippets", "type": "raw-file", "repo": "x/snippets", "path": "src/snippet.js"}

SHA1 = "1111111111111111111111111111111111111111"
SHA2 = "2222222222222222222222222222222222222222"


def _read(path):
    return json.loads(path.read_text())


def _published(public_dir):
    """Snapshot of the layout without the per-run report."""
    files = snapshot(public_dir)
    files.pop("_index/sync-report.json", None)
    return files


@pytest.fixture
def sync(app_config, host, catalog, runner, clock):
    def _sync(sources, **kwargs):
        return run_sync(app_config, sources=sources, catalog=catalog, client=host, runner=runner, **kwargs)
    return _sync


def test_release_asset_round_trip(sync, host, public_dir):
    """Test one release is published with manifest, pointer, indexes and state."""
    host.add_release("x/y", "v1.4.0", {"foo.js": b"console.log(1)", "foo.css": b"body{}"})
    
    report = sync([FOO])
    
    assert report.sources[0].status == Status.OK
    assert report.changed is True
    assert report.built_at == "2024-05-01T12:00:00Z"
    
    version_dir = public_dir / "foo" / "v1.4.0"
    assert sorted(p.name for p in version_dir.iterdir()) == ["foo.js", "manifest.json"]
    manifest = _read(version_dir / "manifest.json")
    assert manifest["package"] == "foo"
    assert manifest["version"] == "v1.4.0"
    assert manifest["channel"] == "stable"
    assert manifest["built_at"] == "2024-05-01T12:00:00Z"
    assert manifest["upstream"]["tag"] == "v1.4.0"
    assert manifest["files"] == {"foo.js": {"integrity": compute_sri(b"console.log(1)"), "bytes": 14}}
    
    assert snapshot(public_dir / "foo" / "@latest") == snapshot(version_dir)
    assert _read(public_dir / "foo" / "versions.json")["versions"] == [
        {"version": "v1.4.0", "channel": "stable", "built_at": "2024-05-01T12:00:00Z"},
    ]
    assert _read(public_dir / "_index" / "index.json")["packages"]["foo"]["last_latest"]["version"] == "v1.4.0"
    assert _read(public_dir / "_index" / "external-state.json") == {"foo": {"latest": "github:x/y@v1.4.0"}}
    
    bundle = _read(public_dir / "_index" / "bundle-manifest.json")
    assert bundle["packages"]["foo"]["versions"]["v1.4.0"]["files"]["foo.js"]["url"] == "/foo/v1.4.0/foo.js"
    
    stored_report = _read(public_dir / "_index" / "sync-report.json")
    assert stored_report["sources"][0]["status"] == "OK"


def test_second_run_without_changes_is_a_no_op(sync, host, public_dir, clock):
    """Test an unchanged upstream downloads nothing and rewrites nothing."""
    host.add_release("x/y", "v1.4.0", {"foo.js": b"js"})
    sync([FOO])
    before = _published(public_dir)
    downloads = len(host.downloads)
    
    clock.tick()
    report = sync([FOO])
    
    assert report.sources[0].status == Status.SKIP
    assert report.changed is False
    assert len(host.downloads) == downloads
    assert _published(public_dir) == before
    assert _read(public_dir / "_index" / "sync-report.json")["sources"][0]["status"] == "SKIP"


def test_new_release_keeps_old_version_dir(sync, host, public_dir, clock):
    host.add_release("x/y", "v1.4.0", {"foo.js": b"old"})
    sync([FOO])
    old = snapshot(public_dir / "foo" / "v1.4.0")
    
    clock.tick()
    host.add_release("x/y", "v1.5.0", {"foo.js": b"new"})
    sync([FOO])
    
    assert snapshot(public_dir / "foo" / "v1.4.0") == old
    assert (public_dir / "foo" / "@latest" / "foo.js").read_bytes() == b"new"
    versions = _read(public_dir / "foo" / "versions.json")["versions"]
    assert [v["version"] for v in versions] == ["v1.5.0", "v1.4.0"]
    assert versions[0]["built_at"] == "2024-05-01T13:00:00Z"


def test_semver_first_run_indexes_latest_first(sync, host, public_dir):
    """Test @latest and the head of versions.json agree after a first run."""
    host.add_release("x/lib", "v1.0.0", {"lib.js": b"1.0.0"})
    host.add_release("x/lib", "v1.1.0-beta.1", {"lib.js": b"beta"}, prerelease=True)
    
    report = sync([LIB])
    
    row = report.sources[0]
    assert row.status == Status.OK
    assert [t.target for t in row.targets] == ["latest", "stable", "beta"]
    versions = _read(public_dir / "lib" / "versions.json")["versions"]
    assert versions[0]["version"] == "v1.0.0"
    summary = _read(public_dir / "_index" / "index.json")["packages"]["lib"]
    assert summary["last_latest"]["version"] == "v1.0.0"
    assert summary["last_stable"]["version"] == "v1.0.0"
    assert summary["last_beta"]["version"] == "v1.1.0-beta.1"
    assert (public_dir / "lib" / "v1" / "lib.js").read_bytes() == b"1.0.0"
    assert (public_dir / "lib" / "v1.0" / "lib.js").read_bytes() == b"1.0.0"


def test_semver_channels_update_independently(sync, host, public_dir, clock):
    """Test a new beta republishes @beta only."""
    host.add_release("x/lib", "v1.0.0", {"lib.js": b"1.0.0"})
    host.add_release("x/lib", "v1.1.0-beta.1", {"lib.js": b"beta1"}, prerelease=True)
    sync([LIB])
    stable_before = snapshot(public_dir / "lib" / "@stable")
    latest_before = snapshot(public_dir / "lib" / "@latest")
    major_before = snapshot(public_dir / "lib" / "v1")
    minor_before = snapshot(public_dir / "lib" / "v1.0")
    last_stable_before = _read(public_dir / "_index" / "index.json")["packages"]["lib"]["last_stable"]
    
    clock.tick()
    host.add_release("x/lib", "v1.1.0-beta.2", {"lib.js": b"beta2"}, prerelease=True)
    report = sync([LIB])
    
    statuses = {t.target: t.status for t in report.sources[0].targets}
    assert statuses == {"latest": Status.SKIP, "stable": Status.SKIP, "beta": Status.OK}
    assert snapshot(public_dir / "lib" / "@stable") == stable_before
    assert snapshot(public_dir / "lib" / "@latest") == latest_before
    assert snapshot(public_dir / "lib" / "v1") == major_before
    assert snapshot(public_dir / "lib" / "v1.0") == minor_before
    last_stable = _read(public_dir / "_index" / "index.json")["packages"]["lib"]["last_stable"]
    assert last_stable == last_stable_before == {
        "version": "v1.0.0", "channel": "stable", "built_at": "2024-05-01T12:00:00Z",
    }
    assert (public_dir / "lib" / "@beta" / "lib.js").read_bytes() == b"beta2"
    assert (public_dir / "lib" / "v1.1.0-beta.1" / "lib.js").read_bytes() == b"beta1"
    state = _read(public_dir / "_index" / "external-state.json")
    assert state["lib"]["beta"] == "github:x/lib@v1.1.0-beta.2"


def test_raw_file_publishes_one_version_per_commit(sync, host, public_dir, clock):
    host.commits[("x/snippets", "main")] = SHA1
    host.set_file("x/snippets", SHA1, "src/snippet.js", b"one")
    sync([RAW])
    
    clock.tick()
    host.commits[("x/snippets", "main")] = SHA2
    host.set_file("x/snippets", SHA2, "src/snippet.js", b"two")
    sync([RAW])
    
    assert (public_dir / "snippets" / "v0.0.0-111111111111" / "snippet.js").read_bytes() == b"one"
    assert (public_dir / "snippets" / "v0.0.0-222222222222" / "snippet.js").read_bytes() == b"two"
    manifest = _read(public_dir / "snippets" / "@latest" / "manifest.json")
    assert manifest["version"] == "v0.0.0-222222222222"
    assert manifest["channel"] is None
    assert manifest["upstream"]["commit"] == SHA2
    assert not (public_dir / "snippets" / "v0").exists()


def test_failures_are_isolated(sync, host, public_dir):
    """Test one broken source never blocks the others."""
    host.add_release("x/y", "v1.4.0", {"foo.js": b"js"})
    host.add_release("x/broken", "v1.0.0", {"other.css": b"css"})
    sources = [
        {"package": "mystery", "type": "ftp"},
        {"package": "broken", "type": "release-asset", "repo": "x/broken", "asset_regex": r"\.js$"},
        {"package": "foo", "type": "release-asset", "repo": "x/y", "asset_regex": r"\.js$"},
        {"package": "_bad", "type": "raw-file"},
    ]
    
    report = sync(sources)
    
    assert [s.status for s in report.sources] == [Status.FAIL, Status.FAIL, Status.OK, Status.FAIL]
    assert "Unknown source type" in report.sources[0].detail
    assert "other.css" in report.sources[1].detail
    assert report.exit_code == 0
    assert (public_dir / "foo" / "@latest" / "foo.js").exists()
    assert not (public_dir / "broken").exists()
    assert _read(public_dir / "_index" / "external-state.json") == {"foo": {"latest": "github:x/y@v1.4.0"}}


def test_strict_mode_sets_exit_code(sync, host):
    host.failing.add("x/y")
    
    assert sync([FOO], strict=True).exit_code == 1
    assert sync([FOO], strict=False).exit_code == 0


def test_failed_target_is_retried_next_run(sync, host, public_dir, clock):
    """Test a failed publish leaves the ledger untouched so the next run retries."""
    host.add_release("x/y", "v1.4.0", {"foo.js": b"js"})
    host.blobs.clear()
    assert sync([FOO]).sources[0].status == Status.FAIL
    
    clock.tick()
    host.blobs["https://github.test/x/y/releases/download/v1.4.0/foo.js"] = b"js"
    
    assert sync([FOO]).sources[0].status == Status.OK
    assert (public_dir / "foo" / "v1.4.0" / "foo.js").read_bytes() == b"js"


def test_detail_is_truncated(sync, host):
    names = {f"asset-{i:03d}-with-a-long-name.css": b"x" for i in range(40)}
    host.add_release("x/y", "v1.4.0", names)
    
    detail = sync([FOO]).sources[0].detail
    
    assert len(detail) == 300
    assert detail.endswith("...")


def test_ui_assets_copied_when_changed(sync, host, public_dir, tmp_path):
    pages = tmp_path / "pages"
    pages.mkdir()
    (pages / "index.html").write_text("<html></html>")
    (pages / "app.js").write_text("app()")
    host.add_release("x/y", "v1.4.0", {"foo.js": b"js"})
    
    sync([FOO])
    
    assert (public_dir / "index.html").read_text() == "<html></html>"
    assert (public_dir / "app.js").read_text() == "app()"
    assert not (public_dir / "styles.css").exists()


def test_only_filter(sync, host, public_dir):
    host.add_release("x/y", "v1.4.0", {"foo.js": b"js"})
    host.add_release("x/lib", "v1.0.0", {"lib.js": b"lib"})
    
    report = sync([FOO, LIB], only=["lib"])
    
    assert [s.package for s in report.sources] == ["lib"]
    assert not (public_dir / "foo").exists()


def test_bundle_manifest_covers_every_version(sync, host, public_dir):
    host.add_release("x/lib", "v1.0.0", {"lib.js": b"1"})
    host.add_release("x/lib", "v2.0.0-beta.1", {"lib.js": b"2b"}, prerelease=True)
    host.commits[("x/snippets", "main")] = SHA1
    host.set_file("x/snippets", SHA1, "src/snippet.js", b"one")
    
    sync([LIB, RAW])
    
    bundle = _read(public_dir / "_index" / "bundle-manifest.json")
    assert bundle["generated_at"] == "2024-05-01T12:00:00Z"
    assert sorted(bundle["packages"]) == ["lib", "snippets"]
    lib = bundle["packages"]["lib"]
    assert sorted(lib["versions"]) == ["v1.0.0", "v2.0.0-beta.1"]
    assert lib["channels"]["last_beta"]["version"] == "v2.0.0-beta.1"
    raw_version = bundle["packages"]["snippets"]["versions"]["v0.0.0-111111111111"]
    assert raw_version["commit"] == SHA1
    assert raw_version["files"]["snippet.js"]["integrity"] == compute_sri(b"one")


def test_config_edit_needs_force_to_republish(sync, host, public_dir, clock):
    """Test selection changes on an unchanged upstream apply only on a forced run."""
    host.add_release("x/y", "v1.4.0", {"foo.js": b"js", "foo.css": b"css"})
    sync([FOO])
    widened = dict(FOO, asset_regex=r"\.(js|css)$")
    
    clock.tick()
    assert sync([widened]).sources[0].status == Status.SKIP
    assert not (public_dir / "foo" / "@latest" / "foo.css").exists()
    
    report = sync([widened, LIB], force=True, only=["foo"])
    
    assert report.sources[0].status == Status.OK
    assert (public_dir / "foo" / "@latest" / "foo.css").read_bytes() == b"css"
    assert _read(public_dir / "_index" / "external-state.json") == {"foo": {"latest": "github:x/y@v1.4.0"}}
