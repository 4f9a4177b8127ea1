"""Version index and global package index entities."""
from typing import Any

from pydantic import BaseModel, Field

from cdn_registry.domain.entities.manifest import Channel


class VersionEntry(BaseModel):
    """One published version in ``versions.json``."""
    version: str
    channel: Channel | None
    built_at: str


class VersionIndex(BaseModel):
    """Per-package version list, newest ``built_at`` first."""
    package: str
    versions: list[VersionEntry] = Field(default_factory=list)


class PackageSummary(BaseModel):
    """Denormalized channel snapshot of one package in ``index.json``."""
    last_stable: VersionEntry | None = None
    last_beta: VersionEntry | None = None
    last_latest: VersionEntry | None = None
    meta: dict[str, Any] | None = None


class GlobalIndex(BaseModel):
    """Global package index."""
    generated_at: str | None = None
    packages: dict[str, PackageSummary] = Field(default_factory=dict)
