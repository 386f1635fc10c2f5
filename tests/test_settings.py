from __future__ import annotations

import pytest

from lingo_progress.app import AppSettings, bootstrap
from lingo_progress.engine.session import AnswerSubmission, Exercise


@pytest.fixture
def base_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("APP_NAME", "APP_ENV", "LOG_LEVEL", "SQLALCHEMY_ECHO", "DEFAULT_DIFFICULTY", "ACHIEVEMENT_REWARD_XP"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    return monkeypatch


def test_defaults(base_env) -> None:
    settings = AppSettings.from_env()

    assert settings.app_name == "Lingo Progress"
    assert settings.log_level == "INFO"
    assert settings.sqlalchemy_echo is False
    assert settings.default_difficulty == 1
    assert settings.achievement_reward_xp == 50


def test_database_url_expands_variables(base_env) -> None:
    base_env.setenv("DATA_DIR", "/tmp/lingo")
    base_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///$DATA_DIR/progress.db")

    assert AppSettings.from_env().database_url == "sqlite+aiosqlite:////tmp/lingo/progress.db"


def test_missing_database_url_is_rejected(base_env) -> None:
    base_env.delenv("DATABASE_URL")

    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        AppSettings.from_env()


@pytest.mark.parametrize("value", ["0", "6", "hard"])
def test_invalid_default_difficulty_is_rejected(base_env, value: str) -> None:
    base_env.setenv("DEFAULT_DIFFICULTY", value)

    with pytest.raises(RuntimeError, match="DEFAULT_DIFFICULTY"):
        AppSettings.from_env()


def test_negative_reward_is_rejected(base_env) -> None:
    base_env.setenv("ACHIEVEMENT_REWARD_XP", "-1")

    with pytest.raises(RuntimeError, match="ACHIEVEMENT_REWARD_XP"):
        AppSettings.from_env()


@pytest.mark.asyncio
async def test_bootstrap_builds_working_service(base_env, clock) -> None:
    base_env.setenv("ACHIEVEMENT_REWARD_XP", "10")
    base_env.setenv("DEFAULT_DIFFICULTY", "4")
    service = await bootstrap(AppSettings.from_env(), clock)

    empty = service.start_session([])
    assert empty.difficulty_tier == 4
    empty.abandon_session()

    aggregator = service.start_session([Exercise("ex-0", 1)])
    aggregator.submit_answer(AnswerSubmission("ex-0", "nero", True, 2_000))
    result = await service.complete_session("anna", aggregator)

    assert result.summary.total_xp == 17
    assert result.progress.total_xp == 17 + 10 + 10
    assert result.progress.unlocked_achievement_ids == {"first_activity", "perfect_session"}
