"""Adaptive difficulty tier selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import InvalidInputError


MIN_TIER = 1
MAX_TIER = 5
CORRECT_STREAK_TO_RAISE = 3
INCORRECT_STREAK_TO_LOWER = 2

REASON_CORRECT_STREAK = "correct_streak"
REASON_INCORRECT_STREAK = "incorrect_streak"

_LABELS = ("Beginner", "Elementary", "Intermediate", "Advanced", "Expert")


@dataclass(frozen=True, slots=True)
class DifficultyAdjustment:
    """Tier to use for the next exercise and why it moved, if it did."""

    new_tier: int
    difficulty_changed: bool
    reason: Optional[str] = None


def validate_tier(tier: int) -> int:
    """Return ``tier`` unchanged or raise when it is outside 1..5."""
    if isinstance(tier, bool) or not isinstance(tier, int) or not MIN_TIER <= tier <= MAX_TIER:
        raise InvalidInputError(f"Difficulty tier must be an integer between {MIN_TIER} and {MAX_TIER}, got {tier!r}.")
    return tier


def adjust_difficulty(*, current_tier: int, correct_streak: int, incorrect_streak: int) -> DifficultyAdjustment:
    """Pick the next tier from the running answer streaks.

    The reason is reported even when the tier is pinned at the ceiling or
    floor, in which case ``difficulty_changed`` is false.
    """
    validate_tier(current_tier)

    if correct_streak >= CORRECT_STREAK_TO_RAISE:
        new_tier = min(current_tier + 1, MAX_TIER)
        return DifficultyAdjustment(new_tier, new_tier != current_tier, REASON_CORRECT_STREAK)

    if incorrect_streak >= INCORRECT_STREAK_TO_LOWER:
        new_tier = max(current_tier - 1, MIN_TIER)
        return DifficultyAdjustment(new_tier, new_tier != current_tier, REASON_INCORRECT_STREAK)

    return DifficultyAdjustment(current_tier, False)


def difficulty_label(tier: int) -> str:
    """Human-readable name of ``tier``, or ``"Unknown"`` outside 1..5."""
    if isinstance(tier, int) and MIN_TIER <= tier <= MAX_TIER:
        return _LABELS[tier - 1]
    return "Unknown"
