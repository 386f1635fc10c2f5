from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from lingo_progress.db import Base
from lingo_progress.db.progress import SqlAlchemyProgressStore
from lingo_progress.db.review_items import SqlAlchemyReviewItemStore
from lingo_progress.engine.clock import FixedClock
from lingo_progress.services import ProgressService


@pytest_asyncio.fixture
async def session_factory() -> async_sessionmaker:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def progress_store(session_factory) -> SqlAlchemyProgressStore:
    return SqlAlchemyProgressStore(session_factory)


@pytest.fixture
def review_store(session_factory) -> SqlAlchemyReviewItemStore:
    return SqlAlchemyReviewItemStore(session_factory)


@pytest.fixture
def service(progress_store, review_store, clock) -> ProgressService:
    return ProgressService(progress_store, review_store, clock)
