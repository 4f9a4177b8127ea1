"""Sync run entities."""
from enum import Enum

from pydantic import BaseModel, Field


class Status(str, Enum):
    """Outcome of one source or channel target."""
    OK = "OK"
    SKIP = "SKIP"
    FAIL = "FAIL"


class TargetOutcome(BaseModel):
    """Outcome of one channel target of a source."""
    target: str
    status: Status
    ref: str | None = None
    version: str | None = None
    detail: str = ""


class SourceOutcome(BaseModel):
    """One row of the sync report."""
    package: str
    type: str
    ref: str | None = None
    action: str = ""
    status: Status
    detail: str = ""
    targets: list[TargetOutcome] = Field(default_factory=list)


class SyncReport(BaseModel):
    """Run report written to ``_index/sync-report.json``."""
    run_id: str
    built_at: str
    changed: bool = False
    strict: bool = False
    sources: list[SourceOutcome] = Field(default_factory=list)
    
    @property
    def failed(self) -> list[SourceOutcome]:
        return [s for s in self.sources if s.status == Status.FAIL]
    
    @property
    def exit_code(self) -> int:
        """1 only when strict mode was requested and at least one source failed."""
        return 1 if self.strict and self.failed else 0
