"""Runtime configuration loaded from the environment (or a .env file)."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Campus Event Platform API"
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_destination: str = "stdout"  # stdout, stderr or file
    log_file: str | None = None

    # Auth
    bcrypt_rounds: int = 10
    min_password_length: int = 6

    # Venue schedule window when no end date is supplied
    default_schedule_days: int = 7

    seed_demo_data: bool = False

    model_config = SettingsConfigDict(
        env_prefix="CAMPUS_EVENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
