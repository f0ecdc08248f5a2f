"""Pydantic models for inbound WhatsApp gateway webhooks."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.reminders.timezones import parse_wall_time, resolve_timezone

# Title used when the bot does not supply one
DEFAULT_BOT_REMINDER_TITLE = "Reminder from Reminder App"

# Timezone used when neither the bot nor the user supplies one
DEFAULT_BOT_REMINDER_TIMEZONE = "Asia/Kolkata"


class VerificationCallback(BaseModel):
    """Answer to a verification poll, forwarded by the gateway."""

    model_config = ConfigDict(populate_by_name=True)

    user_phone_number: str = Field(..., min_length=1, alias="userPhoneNumber")
    message_body: str | None = Field(None, alias="messageBody")


class BotReminderRequest(BaseModel):
    """Reminder captured by the WhatsApp bot from a user's message."""

    model_config = ConfigDict(populate_by_name=True)

    is_reminder: bool = Field(False, alias="isReminder")
    whatsapp_number: str = Field(..., min_length=1, alias="whatsappNumber")
    reminder_title: str | None = Field(None, alias="reminderTitle")
    reminder_description: str | None = Field(None, alias="reminderDescription")
    reminder_date_time: str | None = Field(None, alias="reminderDateTime")
    time_zone: str | None = Field(None, alias="timeZone")

    @field_validator("reminder_date_time")
    @classmethod
    def date_time_parses(cls, value: str | None) -> str | None:
        """Reject date-times the scheduler could never evaluate."""
        if value is not None:
            parse_wall_time(value)
        return value

    @field_validator("time_zone")
    @classmethod
    def timezone_known(cls, value: str | None) -> str | None:
        """Reject unknown timezone names."""
        if value is not None:
            resolve_timezone(value)
        return value


class WebhookResponse(BaseModel):
    """Response model for webhook endpoints."""

    success: bool = Field(..., description="Whether the webhook was acted on")
    message: str = Field(..., description="Human readable outcome")
    reminder_id: UUID | None = Field(None, description="ID of a created reminder")
