"""Daily activity streak transitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional


@dataclass(frozen=True, slots=True)
class StreakUpdate:
    """Outcome of registering activity on a given day."""

    new_streak: int
    longest_streak: int
    streak_maintained: bool
    streak_broken: bool
    is_new_record: bool


@dataclass(frozen=True, slots=True)
class StreakStatus:
    """Motivational tier shown for a streak length."""

    level: str
    message: str


_STREAK_TIERS = (
    (100, "master", "Legendary streak!"),
    (30, "expert", "On fire!"),
    (14, "advanced", "Crushing it!"),
    (7, "intermediate", "Building momentum!"),
)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def update_streak(
    *,
    last_active_date: Optional[date],
    current_streak: int,
    longest_streak: int,
    today: date,
) -> StreakUpdate:
    """Apply one day of activity to the streak counters.

    Days are compared as calendar dates, so calling this repeatedly on the
    same day leaves the streak untouched.
    """
    today = _as_date(today)
    last_active = _as_date(last_active_date) if last_active_date is not None else None

    streak_maintained = False
    streak_broken = False

    if last_active == today:
        new_streak = current_streak
        streak_maintained = True
    elif last_active == today - timedelta(days=1):
        new_streak = current_streak + 1
        streak_maintained = True
    else:
        new_streak = 1
        streak_broken = current_streak > 0

    return StreakUpdate(
        new_streak=new_streak,
        longest_streak=max(longest_streak, new_streak),
        streak_maintained=streak_maintained,
        streak_broken=streak_broken,
        is_new_record=new_streak > longest_streak,
    )


def streak_status(streak: int) -> StreakStatus:
    """Describe how impressive a streak is."""
    for threshold, level, message in _STREAK_TIERS:
        if streak >= threshold:
            return StreakStatus(level=level, message=message)
    return StreakStatus(level="beginner", message="Keep going!")
