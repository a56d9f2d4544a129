"""Injectable time source.

Services that stamp movements or ``last_updated`` receive a ``Clock`` instead
of calling ``datetime.now()`` so tests can pin the time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time as an aware UTC datetime."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Test clock that stays put until moved."""

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, value: datetime) -> None:
        self._fixed_time = value

    def advance(self, seconds: int = 1) -> datetime:
        self._fixed_time = self._fixed_time + timedelta(seconds=seconds)
        return self._fixed_time


__all__ = ["Clock", "FixedClock", "SystemClock"]
