"""Configuration helpers for the progress engine runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass

from lingo_progress.db import get_database_url
from lingo_progress.engine.achievements import DEFAULT_REWARD_XP
from lingo_progress.engine.difficulty import MAX_TIER, MIN_TIER


DEFAULT_APP_NAME = "Lingo Progress"
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    database_url: str
    sqlalchemy_echo: bool
    default_difficulty: int
    achievement_reward_xp: int

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", DEFAULT_APP_NAME)
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO")
        database_url = get_database_url()
        sqlalchemy_echo = os.getenv("SQLALCHEMY_ECHO", "false").lower() in _TRUE_VALUES

        try:
            default_difficulty = int(os.getenv("DEFAULT_DIFFICULTY", str(MIN_TIER)))
        except ValueError as exc:
            raise RuntimeError("DEFAULT_DIFFICULTY must be an integer.") from exc
        if default_difficulty < MIN_TIER or default_difficulty > MAX_TIER:
            raise RuntimeError(f"DEFAULT_DIFFICULTY must be between {MIN_TIER} and {MAX_TIER}.")

        try:
            achievement_reward_xp = int(os.getenv("ACHIEVEMENT_REWARD_XP", str(DEFAULT_REWARD_XP)))
        except ValueError as exc:
            raise RuntimeError("ACHIEVEMENT_REWARD_XP must be an integer.") from exc
        if achievement_reward_xp < 0:
            raise RuntimeError("ACHIEVEMENT_REWARD_XP must not be negative.")

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            database_url=database_url,
            sqlalchemy_echo=sqlalchemy_echo,
            default_difficulty=default_difficulty,
            achievement_reward_xp=achievement_reward_xp,
        )
