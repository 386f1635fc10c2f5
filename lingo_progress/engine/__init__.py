"""Pure progress calculators and the practice session state machine."""

from .achievements import (
    DEFAULT_ACHIEVEMENTS,
    Achievement,
    AchievementKind,
    AchievementUnlock,
    ActivityEvent,
    evaluate_achievements,
)
from .clock import Clock, FixedClock, SystemClock
from .difficulty import DifficultyAdjustment, adjust_difficulty, difficulty_label
from .exceptions import InvalidInputError, InvalidSessionStateError, ProgressEngineError, StoreError
from .progress import DailyStats, LearnerProgress, SkillStatus
from .session import (
    AnswerRecord,
    AnswerSubmission,
    Exercise,
    SessionAggregator,
    SessionPhase,
    SessionResult,
    SessionSummary,
)
from .srs import ReviewItem, ReviewResult, due_items, new_review_item, review_item
from .streak import StreakUpdate, streak_status, update_streak
from .xp import XPBreakdown, calculate_xp, level_for_xp, progress_fraction, xp_for_next_level

__all__ = [
    "Achievement",
    "AchievementKind",
    "AchievementUnlock",
    "ActivityEvent",
    "AnswerRecord",
    "AnswerSubmission",
    "Clock",
    "DEFAULT_ACHIEVEMENTS",
    "DailyStats",
    "DifficultyAdjustment",
    "Exercise",
    "FixedClock",
    "InvalidInputError",
    "InvalidSessionStateError",
    "LearnerProgress",
    "ProgressEngineError",
    "ReviewItem",
    "ReviewResult",
    "SessionAggregator",
    "SessionPhase",
    "SessionResult",
    "SessionSummary",
    "SkillStatus",
    "StoreError",
    "StreakUpdate",
    "SystemClock",
    "XPBreakdown",
    "adjust_difficulty",
    "calculate_xp",
    "difficulty_label",
    "due_items",
    "evaluate_achievements",
    "level_for_xp",
    "new_review_item",
    "progress_fraction",
    "review_item",
    "streak_status",
    "update_streak",
    "xp_for_next_level",
]
