"""
Clock Module

Injectable time source. Services receive a Clock instead of calling
``datetime.utcnow()`` directly so that timestamps and session expiry can be
controlled in tests.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware UTC time."""
        ...

    def isoformat(self) -> str:
        """Current time as an ISO 8601 string, the format stored on records."""
        return self.now().isoformat()


class SystemClock(Clock):
    """Production clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Test clock with controlled time.

    ``now()`` returns the same value until ``advance()`` or ``set_time()``
    is called.
    """

    def __init__(self, fixed_time: Optional[datetime] = None):
        self._fixed_time = fixed_time or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, time: datetime) -> None:
        self._fixed_time = time

    def advance(self, seconds: float = 1) -> datetime:
        self._fixed_time = self._fixed_time + timedelta(seconds=seconds)
        return self._fixed_time
