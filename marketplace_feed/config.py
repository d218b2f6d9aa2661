"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to localize every event timestamp",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    feed_source_limit: int = Field(
        default=100,
        description="Maximum number of most recent rows requested from each source",
        gt=0,
    )
    feed_initial_display_count: int = Field(
        default=20,
        description="Number of events visible when a feed is opened",
        gt=0,
    )
    feed_display_increment: int = Field(
        default=20,
        description="Number of events revealed by each load-more request",
        gt=0,
    )
    feed_load_more_delay: float = Field(
        default=0.3,
        description="Seconds a load-more request waits before revealing events",
        ge=0,
    )
    feed_refresh_debounce: float = Field(
        default=1.0,
        description="Seconds of quiet required before a change triggers re-aggregation",
        ge=0,
    )
    read_state_dir: str = Field(
        default=".read_state",
        description="Directory holding the per-viewer read state of synthesized events",
        min_length=1,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
