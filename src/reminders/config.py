"""Configuration for the reminder scheduler using pydantic-settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE
from src.reminders.timezones import ReminderTimeError, resolve_timezone


class ReminderSchedulerConfig(BaseSettings):
    """Configuration for the reminder scheduler.

    All settings are loaded from environment variables with the REMINDER_ prefix.

    :param tick_interval_seconds: Seconds between scheduler ticks.
    :param server_timezone: IANA timezone to render instants in. Host local time if unset.
    :param claim_timeout_minutes: Minutes before an unfinished in-flight claim is released.
    :param require_verified_whatsapp: Only deliver to users with a verified number.
    """

    model_config = SettingsConfigDict(
        env_prefix="REMINDER_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tick_interval_seconds: int = Field(
        default=60,
        ge=1,
        le=3600,
        description="Seconds between scheduler ticks",
    )
    server_timezone: str | None = Field(
        default=None,
        description="IANA timezone used to render reminder instants",
    )
    claim_timeout_minutes: int = Field(
        default=10,
        ge=1,
        le=1440,
        description="Minutes before a stale in-flight claim is released",
    )
    require_verified_whatsapp: bool = Field(
        default=False,
        description="Only deliver to users whose WhatsApp number is verified",
    )

    @field_validator("server_timezone")
    @classmethod
    def validate_server_timezone(cls, v: str | None) -> str | None:
        """Reject unknown timezone names at startup.

        :param v: Raw timezone name from the environment.
        :returns: The validated name, or None when unset.
        :raises ValueError: If the name is not a known IANA timezone.
        """
        if v is None or not v.strip():
            return None
        try:
            resolve_timezone(v)
        except ReminderTimeError as e:
            raise ValueError(str(e)) from e
        return v.strip()


@lru_cache
def get_reminder_settings() -> ReminderSchedulerConfig:
    """Get cached reminder scheduler settings.

    :returns: Configured ReminderSchedulerConfig instance.
    """
    return ReminderSchedulerConfig()
