"""Sync state and run report operations."""
from cdn_registry.domain.entities.run import SyncReport
from cdn_registry.domain.entities.state import SyncState
from cdn_registry.infra.stores.base import BaseStore


class StateStore(BaseStore):
    """Store for ``_index/external-state.json`` and ``_index/sync-report.json``."""
    
    def load_state(self) -> SyncState:
        """Load the idempotency ledger; a missing file means everything republishes."""
        data = self._read_json(self.paths.state_key())
        return SyncState(data if isinstance(data, dict) else None)
    
    def save_state(self, state: SyncState) -> None:
        """Persist the idempotency ledger."""
        self._write_json(self.paths.state_key(), state.to_dict())
    
    def write_report(self, report: SyncReport) -> None:
        """Write the run report."""
        self._write_json(self.paths.report_key(), report.model_dump(mode="json"))
    
    def read_report(self) -> dict | None:
        return self._read_json(self.paths.report_key())
