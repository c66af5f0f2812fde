"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables with STEM_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="STEM_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    database_path: str = "stem_learning.db"
    log_level: str = "INFO"
    log_format: str = "console"

    # --- Identity ---
    keyring_service: str = "stem-learning"
    password_min_length: int = 6

    # --- Gamification ---
    daily_streak_xp: int = 25
    perfect_quiz_bonus_xp: int = 50
    lesson_complete_xp: int = 50
    leaderboard_default_limit: int = 50
    active_day_threshold_seconds: int = 180


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
