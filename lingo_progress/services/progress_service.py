"""Imperative shell around the progress engine: one read, one pure fold, one write."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence

from lingo_progress.engine.achievements import DEFAULT_ACHIEVEMENTS, Achievement
from lingo_progress.engine.clock import Clock, SystemClock
from lingo_progress.engine.difficulty import MIN_TIER
from lingo_progress.engine.progress import LearnerProgress
from lingo_progress.engine.session import Exercise, SessionAggregator, SessionResult
from lingo_progress.engine.srs import ReviewItem, due_items, new_review_item, review_item


LOGGER = logging.getLogger(__name__)


class ProgressStore(Protocol):
    """Durable learner progress, read at session start and written at session end."""

    async def load_progress(self, user_id: str) -> LearnerProgress:
        ...

    async def save_progress(self, user_id: str, progress: LearnerProgress) -> None:
        ...


class ReviewItemStore(Protocol):
    """Durable spaced-repetition state of each learnable fact."""

    async def load_review_item(self, user_id: str, item_id: str) -> Optional[ReviewItem]:
        ...

    async def save_review_item(self, user_id: str, item: ReviewItem) -> None:
        ...

    async def list_review_items(self, user_id: str) -> List[ReviewItem]:
        ...


@dataclass(slots=True)
class ReviewOutcome:
    item: ReviewItem
    days_until_next_review: int
    created: bool


class ProgressService:
    """Coordinates sessions and reviews with the progress and review stores.

    Store errors propagate to the caller unchanged. When a save fails the
    returned progress must be treated as provisional and re-read.
    """

    def __init__(
        self,
        progress_store: ProgressStore,
        review_store: ReviewItemStore,
        clock: Optional[Clock] = None,
        *,
        default_tier: int = MIN_TIER,
        achievements: Iterable[Achievement] = DEFAULT_ACHIEVEMENTS,
    ) -> None:
        self._progress_store = progress_store
        self._review_store = review_store
        self._clock = clock or SystemClock()
        self._default_tier = default_tier
        self._achievements = list(achievements)

    def start_session(
        self,
        exercises: Sequence[Exercise],
        *,
        lesson_id: Optional[str] = None,
        skill_id: Optional[str] = None,
    ) -> SessionAggregator:
        """Return a new aggregator already in the active phase."""
        aggregator = SessionAggregator(
            self._clock,
            default_tier=self._default_tier,
            achievements=self._achievements,
        )
        aggregator.start_session(exercises, lesson_id=lesson_id, skill_id=skill_id)
        return aggregator

    async def get_progress(self, user_id: str) -> LearnerProgress:
        return await self._progress_store.load_progress(user_id)

    async def complete_session(self, user_id: str, aggregator: SessionAggregator) -> SessionResult:
        """Fold an active session into the learner's stored progress."""
        progress = await self._progress_store.load_progress(user_id)
        result = aggregator.end_session(progress)
        await self._progress_store.save_progress(user_id, result.progress)
        LOGGER.info(
            "Saved progress for user %s: %s XP, level %s, streak %s.",
            user_id,
            result.progress.total_xp,
            result.progress.level,
            result.progress.current_streak,
        )
        return result

    async def record_review(self, user_id: str, item_id: str, quality: int) -> ReviewOutcome:
        """Schedule the next review of ``item_id`` after an answer of ``quality``.

        A fact seen for the first time gets a fresh review item before the
        answer is applied.
        """
        now = self._clock.now()
        item = await self._review_store.load_review_item(user_id, item_id)
        created = item is None
        if item is None:
            item = new_review_item(item_id, now)

        result = review_item(item, quality, now=now)
        await self._review_store.save_review_item(user_id, result.item)
        LOGGER.debug(
            "Reviewed %s for user %s with quality %s; next review in %s days.",
            item_id,
            user_id,
            quality,
            result.days_until_next_review,
        )
        return ReviewOutcome(
            item=result.item,
            days_until_next_review=result.days_until_next_review,
            created=created,
        )

    async def due_reviews(self, user_id: str) -> List[ReviewItem]:
        items = await self._review_store.list_review_items(user_id)
        return due_items(items, self._clock.now())
