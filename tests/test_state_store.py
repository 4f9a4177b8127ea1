"""Tests for the idempotency ledger and run report persistence."""
import json

from cdn_registry.domain.entities.run import SourceOutcome, Status, SyncReport
from cdn_registry.domain.entities.state import SyncState


def test_missing_state_file_is_empty(catalog):
    state = catalog.load_state()
    
    assert state.prior_identity("foo", "latest") is None
    assert state.to_dict() == {}


def test_corrupt_state_file_is_treated_as_empty(catalog, public_dir):
    """Test an unreadable ledger just republishes everything."""
    (public_dir / "_index").mkdir()
    (public_dir / "_index" / "external-state.json").write_text("{not json")
    
    assert catalog.load_state().to_dict() == {}


def test_record_identity_marks_changed_only_on_new_value():
    state = SyncState({"foo": {"latest": "github:x/y@v1.0.0"}})
    
    state.record_identity("foo", "latest", "github:x/y@v1.0.0")
    assert state.changed is False
    
    state.record_identity("foo", "stable", "github:x/y@v1.0.0")
    assert state.changed is True
    assert state.prior_identity("foo", "stable") == "github:x/y@v1.0.0"


def test_state_round_trips_through_catalog(catalog, public_dir):
    state = SyncState()
    state.record_identity("foo", "latest", "github:x/y@v1.4.0")
    state.record_identity("bar", "stable", "github:x/z@v2.0.0")
    
    catalog.save_state(state)
    
    stored = json.loads((public_dir / "_index" / "external-state.json").read_text())
    assert list(stored) == ["bar", "foo"]
    assert catalog.load_state().prior_identity("foo", "latest") == "github:x/y@v1.4.0"


def test_non_string_identities_are_ignored():
    state = SyncState({"foo": {"latest": 3}, "bar": "garbage"})
    
    assert state.prior_identity("foo", "latest") is None
    assert state.prior_identity("bar", "latest") is None


def test_report_exit_code_depends_on_strict():
    failing = SourceOutcome(package="foo", type="raw-file", status=Status.FAIL, detail="boom")
    
    assert SyncReport(run_id="r", built_at="t", sources=[failing]).exit_code == 0
    assert SyncReport(run_id="r", built_at="t", strict=True, sources=[failing]).exit_code == 1
    assert SyncReport(run_id="r", built_at="t", strict=True).exit_code == 0


def test_write_report(catalog, public_dir):
    report = SyncReport(
        run_id="run-0",
        built_at="2024-05-01T12:00:00Z",
        sources=[SourceOutcome(package="foo", type="release-asset", status=Status.SKIP, detail="unchanged")],
    )
    
    catalog.write_report(report)
    
    stored = json.loads((public_dir / "_index" / "sync-report.json").read_text())
    assert stored["sources"][0]["status"] == "SKIP"
    assert catalog.read_report() == stored


def test_forget_drops_only_that_package():
    state = SyncState({"foo": {"latest": "github:x/y@v1.0.0"}, "bar": {"latest": "github:x/z@v2.0.0"}})
    
    state.forget("missing")
    assert state.changed is False
    
    state.forget("foo")
    
    assert state.to_dict() == {"bar": {"latest": "github:x/z@v2.0.0"}}
    assert state.prior_identity("foo", "latest") is None
    assert state.changed is True
