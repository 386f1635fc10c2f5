"""Spaced-repetition scheduling for review items (SM-2 variant)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Iterable, List

from .exceptions import InvalidInputError
from .xp import round_half_up


DEFAULT_EASINESS_FACTOR = 2.5
MIN_EASINESS_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3


@dataclass(frozen=True, slots=True)
class ReviewItem:
    """Scheduling state of one learnable fact for one learner."""

    item_id: str
    easiness_factor: float
    interval_days: int
    repetition_count: int
    next_review_date: datetime
    last_reviewed_date: datetime


@dataclass(frozen=True, slots=True)
class ReviewResult:
    """Updated review item after receiving a recall score."""

    item: ReviewItem
    days_until_next_review: int


def new_review_item(item_id: str, now: datetime) -> ReviewItem:
    """Create the scheduling state for a fact seen for the first time."""
    return ReviewItem(
        item_id=item_id,
        easiness_factor=DEFAULT_EASINESS_FACTOR,
        interval_days=1,
        repetition_count=0,
        next_review_date=now,
        last_reviewed_date=now,
    )


def _validate_quality(quality: int) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int) or not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidInputError(f"Recall quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}, got {quality!r}.")
    return quality


def review_item(item: ReviewItem, quality: int, *, now: datetime) -> ReviewResult:
    """Return the next schedule for ``item`` after a review scored ``quality``.

    The easiness factor is updated first and the grown interval uses the
    updated value. A failed recall (quality below 3) resets the repetition
    count and interval.
    """
    _validate_quality(quality)

    miss = MAX_QUALITY - quality
    easiness_factor = max(
        MIN_EASINESS_FACTOR,
        item.easiness_factor + (0.1 - miss * (0.08 + miss * 0.02)),
    )

    if quality < PASSING_QUALITY:
        repetition = 0
        interval = 1
    else:
        repetition = item.repetition_count + 1
        if repetition == 1:
            interval = 1
        elif repetition == 2:
            interval = 6
        else:
            interval = round_half_up(item.interval_days * easiness_factor)

    updated = replace(
        item,
        easiness_factor=easiness_factor,
        interval_days=interval,
        repetition_count=repetition,
        next_review_date=now + timedelta(days=interval),
        last_reviewed_date=now,
    )
    return ReviewResult(item=updated, days_until_next_review=interval)


def due_items(items: Iterable[ReviewItem], now: datetime) -> List[ReviewItem]:
    """Items whose next review is at or before ``now``, in input order."""
    return [item for item in items if item.next_review_date <= now]
