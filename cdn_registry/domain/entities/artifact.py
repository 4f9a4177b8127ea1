"""Resolution and artifact entities exchanged between adapters and the publisher."""
from typing import Any

from pydantic import BaseModel, Field

from cdn_registry.domain.entities.manifest import Channel


class Artifact(BaseModel):
    """One file to publish."""
    name: str
    """Output name inside the version directory (may contain ``/``)."""
    content: bytes


class Candidate(BaseModel):
    """A channel target that resolved to a concrete upstream reference."""
    target: str
    """State key: ``latest``, ``stable`` or ``beta``."""
    pointer: str
    """Pointer directory updated on publish, e.g. ``@latest``."""
    identity: str
    """Idempotency identity compared against the state ledger."""
    ref: str
    """Upstream tag or commit sha."""
    version: str
    """Version id without the leading ``v``."""
    channel: Channel | None
    upstream: dict[str, Any]
    release: dict[str, Any] | None = None
    """Host release payload, when the target came from a release."""


class Resolution(BaseModel):
    """Result of resolving a source against the prior state."""
    candidates: list[Candidate] = Field(default_factory=list)
    """Targets whose identity changed (need materialize + publish)."""
    unchanged: list[Candidate] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    """Target name to resolution failure message."""
    notes: dict[str, str] = Field(default_factory=dict)
    """Targets with nothing to publish upstream (reported as skipped)."""
    
    @property
    def needs_work(self) -> bool:
        return bool(self.candidates)
