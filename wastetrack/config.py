"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./wastetrack.db",
        description="Database connection URL used by SQLAlchemy for the durable store",
        min_length=1,
    )
    app_timezone: str = Field(
        default="Asia/Bangkok",
        description="Timezone used to resolve calendar days and reminder slots",
    )
    notification_check_interval_seconds: int = Field(
        default=60,
        description="Seconds between two scheduler evaluation passes",
        gt=0,
    )
    permission_prompt_timeout_seconds: float = Field(
        default=120.0,
        description="Seconds to wait for a connected client to answer a permission prompt",
        gt=0,
    )
    default_notification_icon: str = Field(
        default="/icons/icon-192x192.png",
        description="Icon used when a notification does not provide one",
    )
    default_notification_badge: str = Field(
        default="/icons/badge-72x72.png",
        description="Badge used by the background channel when none is provided",
    )
    morning_reminder_hour: int = Field(default=9, ge=0, le=23)
    evening_reminder_hour: int = Field(default=19, ge=0, le=23)
    first_tree_credit_threshold: float = Field(
        default=500,
        description="Credits representing one tree equivalent",
        gt=0,
    )
    enable_inbox_channel: bool = Field(
        default=True,
        description="Persist notifications in the inbox so they survive a closed client",
    )

    @model_validator(mode="after")
    def _validate_reminder_hours(self) -> "Settings":
        if self.morning_reminder_hour == self.evening_reminder_hour:
            raise ValueError(
                "MORNING_REMINDER_HOUR and EVENING_REMINDER_HOUR must be different"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
