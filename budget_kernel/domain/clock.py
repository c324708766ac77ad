"""
Clock -- injectable source of "now" for the imperative shell.

Responsibility:
    Timestamps for stored entries, modes and targets, and the default
    fiscal year when a caller does not name one.  Engines never take a
    clock: elapsed time is always derived from the data
    (last_month_with_actuals), so recomputing a snapshot never drifts.

Architecture position:
    Kernel > Domain.  SystemClock is the one sanctioned read of wall time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Source of timezone-aware UTC datetimes.

    Contract:
        Collaborators needing the time receive a Clock in their constructor.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def current_period(self) -> tuple[int, int]:
        """(year, month) of ``now()``."""
        moment = self.now()
        return moment.year, moment.month

    def current_year(self) -> int:
        return self.now().year


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock frozen at a chosen instant.

    ``now()`` is stable until ``advance``, ``tick`` or ``set_time``.  The
    default instant is 2025-01-01 09:00 UTC.
    """

    DEFAULT_TIME = datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __init__(self, fixed_time: datetime | None = None):
        self._base = fixed_time or self.DEFAULT_TIME
        self._offset = timedelta()

    @classmethod
    def at_period(cls, year: int, month: int) -> "DeterministicClock":
        """Clock fixed at 09:00 UTC on the first day of (year, month)."""
        return cls(datetime(year, month, 1, 9, 0, 0, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._base + self._offset

    def set_time(self, time: datetime) -> None:
        self._base = time
        self._offset = timedelta()

    def advance(self, seconds: int = 1) -> None:
        self._offset += timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Advance one second and return the new time."""
        self.advance(1)
        return self.now()
