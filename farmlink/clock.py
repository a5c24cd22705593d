"""Injectable clock so deadline and lateness rules can be tested deterministically.

Services take a ``Clock`` in their constructor and never call
``datetime.now()`` directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta


class Clock(ABC):
    """Abstract clock interface. ``now()`` always returns an aware UTC datetime."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Production clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """Test clock that returns a fixed instant until moved."""

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._fixed_time = as_utc(fixed_time) if fixed_time else datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        self._offset = timedelta()

    def now(self) -> datetime:
        return self._fixed_time + self._offset

    def set_time(self, time: datetime) -> None:
        self._fixed_time = as_utc(time)
        self._offset = timedelta()

    def advance(self, **kwargs: float) -> None:
        """Move the clock forward, e.g. ``advance(days=1, hours=2)``."""
        self._offset += timedelta(**kwargs)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite drops tzinfo on round-trip, so naive values read back from the
    database are interpreted as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
