"""Base store with common operations."""
import json
from typing import Any, Optional

from cdn_registry.infra.local_storage import LocalStorage
from cdn_registry.infra.common.paths import PublicPathBuilder
from cdn_registry.infra.common.logger import get_logger

logger = get_logger(__name__)


class BaseStore:
    """Base class for stores with common operations."""
    
    def __init__(
        self,
        storage: LocalStorage,
        paths: PublicPathBuilder | None = None,
    ):
        """
        Initialize base store.
        
        Args:
            storage: Local storage instance
            paths: Path builder instance (defaults to PublicPathBuilder)
        """
        self.storage = storage
        self.paths = paths or PublicPathBuilder()
    
    def _read_json(self, key: str) -> Optional[Any]:
        """Read JSON file; missing or corrupt files read as None."""
        try:
            body = self.storage.get_object(key)
        except FileNotFoundError:
            return None
        try:
            return json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring unreadable JSON file: %s", key)
            return None
    
    def _write_json(self, key: str, data: Any) -> None:
        """Write pretty-printed JSON with a trailing newline."""
        body = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        self.storage.put_object(key, body.encode("utf-8"))
