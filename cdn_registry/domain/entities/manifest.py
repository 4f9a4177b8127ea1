"""Version manifest entity."""
from typing import Any, Literal
from pydantic import BaseModel


Channel = Literal["stable", "beta"]


class FileEntry(BaseModel):
    """Integrity metadata for one published file."""
    integrity: str
    bytes: int


class VersionManifest(BaseModel):
    """Published version manifest (``manifest.json``)."""
    package: str
    version: str
    channel: Channel | None
    built_at: str
    upstream: dict[str, Any]
    meta: dict[str, Any] | None = None
    files: dict[str, FileEntry]
    
    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the field order readers expect; ``meta`` only when present."""
        data = self.model_dump(mode="json")
        if data.get("meta") is None:
            data.pop("meta", None)
        return data
