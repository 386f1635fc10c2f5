"""Persistent learner progress record and its mutation helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Set

from .exceptions import InvalidInputError
from .xp import level_for_xp, progress_fraction, xp_for_next_level


DAILY_ACTIVITY_GOAL = 5
HIGH_ACCURACY = 0.9


class SkillStatus(str, Enum):
    """Mastery state of a skill-tree node, ordered from least to most advanced."""

    LOCKED = "locked"
    IN_PROGRESS = "in-progress"
    MASTERED = "mastered"

    @property
    def rank(self) -> int:
        return _SKILL_RANK[self]


_SKILL_RANK = {
    SkillStatus.LOCKED: 0,
    SkillStatus.IN_PROGRESS: 1,
    SkillStatus.MASTERED: 2,
}


@dataclass(slots=True)
class DailyStats:
    """Activity totals for one calendar day."""

    activities_completed: int = 0
    xp_earned: int = 0
    minutes_practiced: int = 0


@dataclass(slots=True)
class LearnerProgress:
    """Everything the engine knows about one learner between sessions.

    ``level`` always mirrors ``total_xp``; XP should only be added through
    :meth:`award_xp` so the two never drift apart.
    """

    total_xp: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: Optional[date] = None
    unlocked_achievement_ids: Set[str] = field(default_factory=set)
    skill_status: Dict[str, SkillStatus] = field(default_factory=dict)
    completed_lesson_ids: Set[str] = field(default_factory=set)
    total_activities_completed: int = 0
    total_minutes_learned: int = 0
    average_accuracy: float = 0.0
    high_accuracy_sessions: int = 0
    daily_stats: Dict[date, DailyStats] = field(default_factory=dict)

    @classmethod
    def new(cls) -> LearnerProgress:
        """Return the record of a learner with no activity yet."""
        return cls()

    @property
    def xp_for_next_level(self) -> int:
        return xp_for_next_level(self.total_xp)

    @property
    def progress_fraction(self) -> float:
        return progress_fraction(self.total_xp)

    def copy(self) -> LearnerProgress:
        """Return an independent copy, including the mutable collections."""
        return LearnerProgress(
            total_xp=self.total_xp,
            level=self.level,
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            last_active_date=self.last_active_date,
            unlocked_achievement_ids=set(self.unlocked_achievement_ids),
            skill_status=dict(self.skill_status),
            completed_lesson_ids=set(self.completed_lesson_ids),
            total_activities_completed=self.total_activities_completed,
            total_minutes_learned=self.total_minutes_learned,
            average_accuracy=self.average_accuracy,
            high_accuracy_sessions=self.high_accuracy_sessions,
            daily_stats={
                day: DailyStats(stats.activities_completed, stats.xp_earned, stats.minutes_practiced)
                for day, stats in self.daily_stats.items()
            },
        )

    def award_xp(self, amount: int) -> int:
        """Add ``amount`` XP, re-derive the level and return the new level."""
        if amount < 0:
            raise InvalidInputError(f"XP awards cannot be negative, got {amount}.")
        self.total_xp += amount
        self.level = level_for_xp(self.total_xp)
        return self.level

    def daily(self, day: date) -> DailyStats:
        """Return the stats of ``day``, creating an empty entry when missing."""
        stats = self.daily_stats.get(day)
        if stats is None:
            stats = DailyStats()
            self.daily_stats[day] = stats
        return stats

    def today_activities_remaining(self, today: date) -> int:
        """Activities still needed on ``today`` to reach the daily goal."""
        stats = self.daily_stats.get(today)
        completed = stats.activities_completed if stats else 0
        return max(0, DAILY_ACTIVITY_GOAL - completed)

    def record_activity(self, day: date, accuracy: float, minutes: int) -> None:
        """Count one finished activity in the lifetime and daily totals.

        ``average_accuracy`` is the running mean over every activity.
        """
        self.total_activities_completed += 1
        self.total_minutes_learned += minutes
        count = self.total_activities_completed
        self.average_accuracy = (self.average_accuracy * (count - 1) + accuracy) / count
        if accuracy >= HIGH_ACCURACY:
            self.high_accuracy_sessions += 1

        stats = self.daily(day)
        stats.activities_completed += 1
        stats.minutes_practiced += minutes

    def skill(self, skill_id: str) -> SkillStatus:
        return self.skill_status.get(skill_id, SkillStatus.LOCKED)

    def advance_skill(self, skill_id: str, status: SkillStatus) -> bool:
        """Move a skill forward to ``status``; lower statuses are ignored.

        Returns whether the stored status changed.
        """
        status = SkillStatus(status)
        if status.rank <= self.skill(skill_id).rank:
            return False
        self.skill_status[skill_id] = status
        return True

    def complete_lesson(self, lesson_id: str) -> bool:
        if lesson_id in self.completed_lesson_ids:
            return False
        self.completed_lesson_ids.add(lesson_id)
        return True

    def to_record(self) -> Dict[str, Any]:
        """Serialize into a JSON-compatible mapping."""
        return {
            "total_xp": self.total_xp,
            "level": self.level,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_active_date": self.last_active_date.isoformat() if self.last_active_date else None,
            "unlocked_achievement_ids": sorted(self.unlocked_achievement_ids),
            "skill_status": {skill_id: status.value for skill_id, status in sorted(self.skill_status.items())},
            "completed_lesson_ids": sorted(self.completed_lesson_ids),
            "total_activities_completed": self.total_activities_completed,
            "total_minutes_learned": self.total_minutes_learned,
            "average_accuracy": self.average_accuracy,
            "high_accuracy_sessions": self.high_accuracy_sessions,
            "daily_stats": {
                day.isoformat(): {
                    "activities_completed": stats.activities_completed,
                    "xp_earned": stats.xp_earned,
                    "minutes_practiced": stats.minutes_practiced,
                }
                for day, stats in sorted(self.daily_stats.items())
            },
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> LearnerProgress:
        """Rebuild a progress record produced by :meth:`to_record`.

        Missing keys fall back to the defaults of a new learner, and the level
        is always re-derived from the stored XP.
        """
        total_xp = int(record.get("total_xp") or 0)
        current_streak = int(record.get("current_streak") or 0)
        longest_streak = max(int(record.get("longest_streak") or 0), current_streak)
        raw_date = record.get("last_active_date")
        return cls(
            total_xp=total_xp,
            level=level_for_xp(total_xp),
            current_streak=current_streak,
            longest_streak=longest_streak,
            last_active_date=date.fromisoformat(raw_date) if raw_date else None,
            unlocked_achievement_ids=set(record.get("unlocked_achievement_ids") or ()),
            skill_status={
                skill_id: SkillStatus(status)
                for skill_id, status in (record.get("skill_status") or {}).items()
            },
            completed_lesson_ids=set(record.get("completed_lesson_ids") or ()),
            total_activities_completed=int(record.get("total_activities_completed") or 0),
            total_minutes_learned=int(record.get("total_minutes_learned") or 0),
            average_accuracy=float(record.get("average_accuracy") or 0.0),
            high_accuracy_sessions=int(record.get("high_accuracy_sessions") or 0),
            daily_stats={
                date.fromisoformat(day): DailyStats(
                    activities_completed=int(stats.get("activities_completed") or 0),
                    xp_earned=int(stats.get("xp_earned") or 0),
                    minutes_practiced=int(stats.get("minutes_practiced") or 0),
                )
                for day, stats in (record.get("daily_stats") or {}).items()
            },
        )
