"""Bootstrap logic for wiring the progress service to its database."""

from __future__ import annotations

import logging
from typing import Optional

from lingo_progress.app.settings import AppSettings
from lingo_progress.db import build_engine, build_session_factory, create_schema
from lingo_progress.db.progress import SqlAlchemyProgressStore
from lingo_progress.db.review_items import SqlAlchemyReviewItemStore
from lingo_progress.engine.achievements import catalogue_with_reward
from lingo_progress.engine.clock import Clock
from lingo_progress.services import ProgressService


LOGGER = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


async def bootstrap(settings: AppSettings, clock: Optional[Clock] = None) -> ProgressService:
    """Build a ready-to-use progress service from the provided settings."""
    _configure_logging(settings.log_level)

    engine = build_engine(settings.database_url, echo=settings.sqlalchemy_echo)
    try:
        await create_schema(engine)
    except Exception:
        LOGGER.exception("Creating the progress schema failed. Aborting startup.")
        await engine.dispose()
        raise

    session_factory = build_session_factory(engine)
    service = ProgressService(
        SqlAlchemyProgressStore(session_factory),
        SqlAlchemyReviewItemStore(session_factory),
        clock,
        default_tier=settings.default_difficulty,
        achievements=catalogue_with_reward(settings.achievement_reward_xp),
    )
    LOGGER.info("%s progress service ready in %s mode.", settings.app_name, settings.app_env)
    return service
