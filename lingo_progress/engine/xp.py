"""Experience point awards and level derivation."""

from __future__ import annotations

import math
from dataclasses import dataclass


XP_PER_LEVEL = 100
SPEED_BONUS_THRESHOLD_MS = 10_000
MAX_STREAK_MULTIPLIER = 10


@dataclass(frozen=True, slots=True)
class XPBreakdown:
    """Components of a single exercise award, each rounded half-up.

    ``total_xp`` is the unrounded component sum rounded once, so it can
    differ by one from the sum of the rounded components.
    """

    base_xp: int
    accuracy_bonus: int
    speed_bonus: int
    streak_bonus: int
    total_xp: int


def calculate_xp(
    *,
    difficulty_tier: int,
    is_correct: bool,
    time_spent_ms: int,
    current_streak: int,
) -> XPBreakdown:
    """Return the XP awarded for one exercise outcome.

    Tiers outside 1..5 are not rejected here; the result for them is
    unspecified but never raises. The speed bonus requires a correct answer
    while the streak bonus only depends on the streak built before this
    answer.
    """
    base_xp = 10 * difficulty_tier
    accuracy_bonus = 0.5 * base_xp if is_correct else 0
    speed_bonus = 0.2 * base_xp if is_correct and time_spent_ms < SPEED_BONUS_THRESHOLD_MS else 0
    streak_bonus = 0.1 * base_xp * min(max(current_streak, 0), MAX_STREAK_MULTIPLIER)
    total = round_half_up(base_xp + accuracy_bonus + speed_bonus + streak_bonus)

    return XPBreakdown(
        base_xp=round_half_up(base_xp),
        accuracy_bonus=round_half_up(accuracy_bonus),
        speed_bonus=round_half_up(speed_bonus),
        streak_bonus=round_half_up(streak_bonus),
        total_xp=max(0, total),
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def level_for_xp(xp: int) -> int:
    """Level reached with ``xp`` total experience (level 1 starts at 0 XP)."""
    return max(0, xp) // XP_PER_LEVEL + 1


def xp_for_next_level(xp: int) -> int:
    """XP still missing before the next level is reached."""
    return level_for_xp(xp) * XP_PER_LEVEL - xp


def progress_fraction(xp: int) -> float:
    """Fraction of the current level already earned, in ``[0, 1)``."""
    return (xp % XP_PER_LEVEL) / XP_PER_LEVEL
