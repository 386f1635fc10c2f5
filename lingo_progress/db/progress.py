"""Persistence of learner progress records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lingo_progress.engine.exceptions import StoreError
from lingo_progress.engine.progress import LearnerProgress

from . import LearnerProgressRecord


LOGGER = logging.getLogger(__name__)


async def get_progress(session: AsyncSession, user_id: str) -> Optional[LearnerProgress]:
    """Return the stored progress for a learner, if any."""
    record = await session.get(LearnerProgressRecord, user_id)
    if record is None:
        return None
    return LearnerProgress.from_record(record.payload)


async def upsert_progress(
    session: AsyncSession,
    user_id: str,
    progress: LearnerProgress,
    now: Optional[datetime] = None,
) -> LearnerProgressRecord:
    """Create or replace the stored progress payload of a learner."""
    if now is None:
        now = datetime.now(timezone.utc)

    payload = progress.to_record()
    record = await session.get(LearnerProgressRecord, user_id)

    if record is None:
        record = LearnerProgressRecord(
            user_id=user_id,
            payload=payload,
            created_at=now,
            updated_at=now,
        )
        session.add(record)
    else:
        record.payload = payload
        record.updated_at = now

    await session.flush()
    return record


class SqlAlchemyProgressStore:
    """Progress store backed by an async SQLAlchemy session factory.

    Each call runs in its own transaction. Failures are logged and raised as
    :class:`StoreError`; nothing is retried.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load_progress(self, user_id: str) -> LearnerProgress:
        """Return the learner's progress, or a fresh record for a new learner."""
        try:
            async with self._session_factory() as session:
                progress = await get_progress(session, user_id)
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to load progress for user %s.", user_id)
            raise StoreError(f"Could not load progress for user {user_id!r}.") from exc

        if progress is None:
            LOGGER.debug("No stored progress for user %s; starting fresh.", user_id)
            return LearnerProgress.new()
        return progress

    async def save_progress(self, user_id: str, progress: LearnerProgress) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await upsert_progress(session, user_id, progress)
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to save progress for user %s.", user_id)
            raise StoreError(f"Could not save progress for user {user_id!r}.") from exc
