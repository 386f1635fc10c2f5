"""Data-driven achievement rules and their evaluation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .progress import LearnerProgress


LOGGER = logging.getLogger(__name__)

DEFAULT_REWARD_XP = 50


class AchievementKind(str, Enum):
    XP = "xp"
    STREAK = "streak"
    LEVEL = "level"
    LESSONS = "lessons"
    FIRST_ACTIVITY = "first-activity"
    PERFECT_ACCURACY = "perfect-accuracy"
    HIGH_ACCURACY_SESSIONS = "high-accuracy-sessions"


@dataclass(frozen=True, slots=True)
class Achievement:
    """Definition of an unlockable achievement.

    Threshold kinds compare a progress counter against ``threshold``; the
    event kinds ignore it.
    """

    id: str
    title: str
    description: str
    kind: AchievementKind
    threshold: int = 0
    xp_reward: int = DEFAULT_REWARD_XP


@dataclass(frozen=True, slots=True)
class ActivityEvent:
    """A finished activity, as seen by the achievement rules."""

    accuracy: float
    exercises_completed: int


@dataclass(frozen=True, slots=True)
class AchievementUnlock:
    achievement_id: str
    xp_reward: int


DEFAULT_ACHIEVEMENTS: Sequence[Achievement] = (
    Achievement("first_activity", "First Steps", "Complete your first activity", AchievementKind.FIRST_ACTIVITY),
    Achievement("perfect_session", "Flawless", "Finish an activity with 100% accuracy", AchievementKind.PERFECT_ACCURACY),
    Achievement("streak_7", "On Fire", "Maintain a 7-day streak", AchievementKind.STREAK, 7),
    Achievement("streak_30", "Unstoppable", "Maintain a 30-day streak", AchievementKind.STREAK, 30),
    Achievement("level_5", "Scholar", "Reach level 5", AchievementKind.LEVEL, 5),
    Achievement("xp_1000", "Dedicated", "Earn 1000 XP", AchievementKind.XP, 1000),
    Achievement("lessons_10", "Lesson Hunter", "Complete 10 lessons", AchievementKind.LESSONS, 10),
    Achievement(
        "grammar_master",
        "Grammar Master",
        "Finish 10 sessions with 90%+ accuracy",
        AchievementKind.HIGH_ACCURACY_SESSIONS,
        10,
    ),
)


def catalogue_with_reward(reward_xp: int, catalogue: Iterable[Achievement] = DEFAULT_ACHIEVEMENTS) -> List[Achievement]:
    """Copy ``catalogue`` with every reward replaced by ``reward_xp``."""
    return [replace(achievement, xp_reward=reward_xp) for achievement in catalogue]


def _is_met(achievement: Achievement, progress: LearnerProgress, event: Optional[ActivityEvent]) -> bool:
    kind = achievement.kind
    if kind is AchievementKind.XP:
        return progress.total_xp >= achievement.threshold
    if kind is AchievementKind.STREAK:
        return progress.current_streak >= achievement.threshold
    if kind is AchievementKind.LEVEL:
        return progress.level >= achievement.threshold
    if kind is AchievementKind.LESSONS:
        return len(progress.completed_lesson_ids) >= achievement.threshold
    if kind is AchievementKind.HIGH_ACCURACY_SESSIONS:
        return progress.high_accuracy_sessions >= achievement.threshold
    if event is None:
        return False
    if kind is AchievementKind.FIRST_ACTIVITY:
        return progress.total_activities_completed >= 1
    if kind is AchievementKind.PERFECT_ACCURACY:
        return event.exercises_completed > 0 and event.accuracy >= 1.0
    return False


def evaluate_achievements(
    progress: LearnerProgress,
    event: Optional[ActivityEvent] = None,
    catalogue: Iterable[Achievement] = DEFAULT_ACHIEVEMENTS,
) -> List[AchievementUnlock]:
    """Return achievements that ``progress`` and ``event`` newly qualify for.

    Ids already present in ``progress.unlocked_achievement_ids`` are never
    returned again.
    """
    unlocks: List[AchievementUnlock] = []
    for achievement in catalogue:
        if achievement.id in progress.unlocked_achievement_ids:
            continue
        if _is_met(achievement, progress, event):
            unlocks.append(AchievementUnlock(achievement.id, achievement.xp_reward))
    return unlocks


def apply_unlocks(progress: LearnerProgress, unlocks: Iterable[AchievementUnlock]) -> List[AchievementUnlock]:
    """Record ``unlocks`` on ``progress`` and award their XP.

    Unlocks whose id is already recorded are skipped, so applying the same
    batch twice awards the reward only once. Returns the unlocks applied.
    """
    applied: List[AchievementUnlock] = []
    for unlock in unlocks:
        if unlock.achievement_id in progress.unlocked_achievement_ids:
            continue
        progress.unlocked_achievement_ids.add(unlock.achievement_id)
        progress.award_xp(unlock.xp_reward)
        applied.append(unlock)
        LOGGER.info("Unlocked achievement %s (+%s XP).", unlock.achievement_id, unlock.xp_reward)
    return applied


def unlock_all_earned(
    progress: LearnerProgress,
    event: Optional[ActivityEvent] = None,
    catalogue: Iterable[Achievement] = DEFAULT_ACHIEVEMENTS,
) -> List[AchievementUnlock]:
    """Evaluate and apply achievements until no further unlock is earned.

    Reward XP can itself cross another threshold, so evaluation repeats
    against the updated record. Each id unlocks at most once.
    """
    catalogue = list(catalogue)
    applied: List[AchievementUnlock] = []
    while True:
        newly_applied = apply_unlocks(progress, evaluate_achievements(progress, event, catalogue))
        if not newly_applied:
            return applied
        applied.extend(newly_applied)
