"""Application settings and configuration.

This module defines all configuration options for the DailyReps backup server.
Settings are loaded from environment variables with sensible defaults. The
instance is frozen: it is built once at startup and handed to each service.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class RateLimitPolicy:
    """Per-identity write quotas over rolling hour/day windows."""

    hourly_limit: int
    daily_limit: int
    hour_window_seconds: int = 3600
    day_window_seconds: int = 86_400


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or a `.env` file.
    """

    # Application metadata
    app_name: str = Field(default="DailyReps Backup", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Shared secrets
    app_secret_key: str = Field(alias="APP_SECRET_KEY", min_length=1)
    admin_secret_key: str | None = Field(default=None, alias="ADMIN_SECRET_KEY")

    # Database configuration
    database_url: str = Field(default="sqlite:///./data/dailyreps.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    storage_workers: int = Field(default=8, ge=1, alias="STORAGE_WORKERS")

    # Upload limits
    max_backup_size_bytes: int = Field(default=5_242_880, ge=1, alias="MAX_BACKUP_SIZE_BYTES")
    warn_backup_size_bytes: int = Field(default=1_048_576, ge=1, alias="WARN_BACKUP_SIZE_BYTES")

    # Rate limiting (per identity)
    max_backups_per_hour: int = Field(default=5, ge=1, alias="MAX_BACKUPS_PER_HOUR")
    max_backups_per_day: int = Field(default=20, ge=1, alias="MAX_BACKUPS_PER_DAY")
    hour_window_seconds: int = Field(default=3600, ge=1, alias="HOUR_WINDOW_SECONDS")
    day_window_seconds: int = Field(default=86_400, ge=1, alias="DAY_WINDOW_SECONDS")

    # Replay window
    max_timestamp_age_seconds: int = Field(default=300, ge=0, alias="MAX_TIMESTAMP_AGE_SECONDS")

    # Envelope inspection (heuristic anti-abuse signal, not a security boundary)
    envelope_app_tag: str = Field(default="dailyreps", alias="ENVELOPE_APP_TAG")
    entropy_threshold: float = Field(default=0.75, ge=0.0, le=1.0, alias="ENTROPY_THRESHOLD")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # CORS configuration for the web client
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        alias="CORS_ORIGINS",
    )
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL with surrounding quotes and whitespace removed."""
        return self.database_url.strip().strip("'\"")

    @property
    def rate_limit_policy(self) -> RateLimitPolicy:
        """Return the configured write quotas as an immutable policy value."""
        return RateLimitPolicy(
            hourly_limit=self.max_backups_per_hour,
            daily_limit=self.max_backups_per_day,
            hour_window_seconds=self.hour_window_seconds,
            day_window_seconds=self.day_window_seconds,
        )

    @property
    def admin_enabled(self) -> bool:
        """Return True when the admin statistics endpoint is configured."""
        return bool(self.admin_secret_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()  # type: ignore[call-arg]
