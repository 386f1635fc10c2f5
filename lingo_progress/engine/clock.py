"""Injectable time sources for streak and review scheduling."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Provides the current moment to the engine."""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Clock backed by the system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a caller-controlled moment."""

    def __init__(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self._moment = moment

    def now(self) -> datetime:
        return self._moment

    def today(self) -> date:
        return self._moment.date()

    def advance(self, *, days: int = 0, minutes: int = 0, seconds: int = 0) -> datetime:
        """Move the clock forward and return the new moment."""
        self._moment += timedelta(days=days, minutes=minutes, seconds=seconds)
        return self._moment

