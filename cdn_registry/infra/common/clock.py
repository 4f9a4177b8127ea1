"""Clock and UUID generation abstraction for testing."""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional
import uuid


class Clock(ABC):
    """Abstract clock interface for time and UUID generation."""
    
    @abstractmethod
    def now(self) -> datetime:
        """Get current UTC datetime."""
        pass
    
    def now_iso(self) -> str:
        """Get current UTC datetime as ISO string with second precision (``...Z``)."""
        return self.now().astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    
    @abstractmethod
    def generate_uuid(self) -> str:
        """Generate a unique UUID string."""
        pass


class SystemClock(Clock):
    """System clock implementation using real time."""
    
    def now(self) -> datetime:
        """Get current UTC datetime."""
        return datetime.now(timezone.utc)
    
    def generate_uuid(self) -> str:
        """Generate a unique UUID string."""
        return str(uuid.uuid4())


class FixedClock(Clock):
    """Clock frozen at a given instant; advance it explicitly."""
    
    def __init__(self, instant: datetime, run_id: str = "run-0"):
        self.instant = instant
        self.run_id = run_id
    
    def now(self) -> datetime:
        return self.instant
    
    def generate_uuid(self) -> str:
        return self.run_id


# Default instance
_default_clock: Optional[Clock] = None


def get_clock() -> Clock:
    """Get the default clock instance."""
    global _default_clock
    if _default_clock is None:
        _default_clock = SystemClock()
    return _default_clock


def set_clock(clock: Clock | None) -> None:
    """Set the default clock instance (for testing). ``None`` restores the system clock."""
    global _default_clock
    _default_clock = clock
