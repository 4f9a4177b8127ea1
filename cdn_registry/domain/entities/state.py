"""Sync state (idempotency ledger) entity."""
from typing import Any, Optional


class SyncState:
    """
    Last processed upstream identity per package and channel target.
    
    Loaded once at the start of a run, passed explicitly to the adapters and
    written once at the end. Identity equality is the only skip criterion.
    """
    
    def __init__(self, data: Optional[dict[str, dict[str, Any]]] = None):
        self._data: dict[str, dict[str, Any]] = {k: dict(v) for k, v in (data or {}).items() if isinstance(v, dict)}
        self.changed = False
    
    def prior_identity(self, package: str, target: str) -> Optional[str]:
        """Get last recorded identity, or None if never published."""
        value = self._data.get(package, {}).get(target)
        return value if isinstance(value, str) else None
    
    def record_identity(self, package: str, target: str, identity: str) -> None:
        """Record identity after a successful publish."""
        if self.prior_identity(package, target) == identity:
            return
        self._data.setdefault(package, {})[target] = identity
        self.changed = True
    
    def forget(self, package: str) -> None:
        """Drop every recorded identity of a package so its next sync republishes."""
        if self._data.pop(package, None) is not None:
            self.changed = True
    
    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {k: dict(v) for k, v in sorted(self._data.items())}
