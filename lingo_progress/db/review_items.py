"""Persistence of spaced-repetition review items."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lingo_progress.engine.exceptions import StoreError
from lingo_progress.engine.srs import ReviewItem

from . import ReviewItemRecord


LOGGER = logging.getLogger(__name__)


def _ensure_utc(value: datetime) -> datetime:
    # SQLite drops the offset on round-trip.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_review_item(record: ReviewItemRecord) -> ReviewItem:
    return ReviewItem(
        item_id=record.item_id,
        easiness_factor=record.easiness_factor,
        interval_days=record.interval_days,
        repetition_count=record.repetition_count,
        next_review_date=_ensure_utc(record.next_review_at),
        last_reviewed_date=_ensure_utc(record.last_reviewed_at),
    )


async def _get_record(session: AsyncSession, user_id: str, item_id: str) -> Optional[ReviewItemRecord]:
    stmt = select(ReviewItemRecord).where(
        ReviewItemRecord.user_id == user_id,
        ReviewItemRecord.item_id == item_id,
    )
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_review_item(session: AsyncSession, user_id: str, item_id: str) -> Optional[ReviewItem]:
    record = await _get_record(session, user_id, item_id)
    if record is None:
        return None
    return _to_review_item(record)


async def upsert_review_item(session: AsyncSession, user_id: str, item: ReviewItem) -> ReviewItemRecord:
    """Create or update the stored schedule of a review item."""
    record = await _get_record(session, user_id, item.item_id)
    if record is None:
        record = ReviewItemRecord(user_id=user_id, item_id=item.item_id)
        session.add(record)

    record.easiness_factor = item.easiness_factor
    record.interval_days = item.interval_days
    record.repetition_count = item.repetition_count
    record.next_review_at = item.next_review_date
    record.last_reviewed_at = item.last_reviewed_date
    await session.flush()
    return record


async def list_review_items(session: AsyncSession, user_id: str) -> List[ReviewItem]:
    """Return every review item of a learner, soonest due first."""
    stmt = (
        select(ReviewItemRecord)
        .where(ReviewItemRecord.user_id == user_id)
        .order_by(ReviewItemRecord.next_review_at, ReviewItemRecord.id)
    )
    result = await session.execute(stmt)
    return [_to_review_item(record) for record in result.scalars().all()]


class SqlAlchemyReviewItemStore:
    """Review item store backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load_review_item(self, user_id: str, item_id: str) -> Optional[ReviewItem]:
        try:
            async with self._session_factory() as session:
                return await get_review_item(session, user_id, item_id)
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to load review item %s for user %s.", item_id, user_id)
            raise StoreError(f"Could not load review item {item_id!r}.") from exc

    async def save_review_item(self, user_id: str, item: ReviewItem) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await upsert_review_item(session, user_id, item)
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to save review item %s for user %s.", item.item_id, user_id)
            raise StoreError(f"Could not save review item {item.item_id!r}.") from exc

    async def list_review_items(self, user_id: str) -> List[ReviewItem]:
        try:
            async with self._session_factory() as session:
                return await list_review_items(session, user_id)
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to list review items for user %s.", user_id)
            raise StoreError(f"Could not list review items for user {user_id!r}.") from exc
