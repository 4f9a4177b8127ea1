"""Source configuration entity."""
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


_PACKAGE_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _check_regex(value: str) -> str:
    try:
        re.compile(value)
    except re.error as e:
        raise ValueError(f"invalid regular expression {value!r}: {e}") from e
    return value


class ExtractRule(BaseModel):
    """Pick entries out of a zip asset."""
    model_config = ConfigDict(extra="forbid")
    
    match: str
    """Regex searched against the entry path inside the zip."""
    rename: str | None = None
    """Output name template (``\\1``/``\\g<name>`` backrefs). None keeps the basename."""
    
    @field_validator("match")
    @classmethod
    def validate_match(cls, value: str) -> str:
        return _check_regex(value)


class OutputRule(BaseModel):
    """Collect build outputs from the working directory."""
    model_config = ConfigDict(extra="forbid")
    
    pattern: str
    """Glob relative to the build working directory, e.g. ``dist/**/*.js``."""
    flatten: bool = True
    """Publish under the basename; otherwise keep the path relative to the workdir."""


class BuildConfig(BaseModel):
    """Optional build-from-source-snapshot step."""
    model_config = ConfigDict(extra="forbid")
    
    enable: bool = False
    workdir: str = "."
    timeout: float = 600
    """Seconds, applied to each of install and run."""
    install: str | None = None
    """None autodetects from lockfiles; empty string skips install."""
    run: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    outputs: list[OutputRule] = Field(default_factory=list)


class SourceConfig(BaseModel):
    """One upstream source feeding one package."""
    model_config = ConfigDict(extra="forbid")
    
    package: str
    type: str
    repo: str | None = None
    ref: str | None = None
    path: str | None = None
    paths: list[str] = Field(default_factory=list)
    asset_regex: str | None = None
    extract: list[ExtractRule] = Field(default_factory=list)
    build: BuildConfig = Field(default_factory=BuildConfig)
    channel: Literal["stable", "beta"] | None = None
    meta: dict[str, Any] | None = None
    
    @field_validator("package")
    @classmethod
    def validate_package(cls, value: str) -> str:
        if not _PACKAGE_RE.match(value) or value.startswith("_"):
            raise ValueError(f"package must be a single path segment not starting with '_': {value!r}")
        return value
    
    @field_validator("asset_regex")
    @classmethod
    def validate_asset_regex(cls, value: str | None) -> str | None:
        return _check_regex(value) if value is not None else None
    
    @property
    def file_paths(self) -> list[str]:
        """Explicit raw file paths (``path`` and ``paths`` combined)."""
        paths = [self.path] if self.path else []
        return paths + [p for p in self.paths if p not in paths]
