"""Pydantic models for reminders API endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.database.reminders.models import ReminderStatus
from src.reminders.timezones import parse_wall_time, resolve_timezone


class ReminderResponse(BaseModel):
    """Response model for a reminder."""

    id: UUID = Field(..., description="Reminder ID")
    user_id: UUID = Field(..., description="Owner of the reminder")
    title: str = Field(..., description="Reminder title")
    description: str | None = Field(None, description="Reminder body")
    date_time: str = Field(..., description="Wall-clock date-time in the reminder's timezone")
    timezone: str = Field(..., description="IANA timezone name")
    status: ReminderStatus = Field(..., description="Current status")
    status_message: str | None = Field(None, description="Last message from the gateway")
    created_at: datetime = Field(..., description="When the reminder was created")
    updated_at: datetime = Field(..., description="When the reminder was last changed")


class ReminderFields(BaseModel):
    """Editable reminder fields shared by create and update requests."""

    title: str = Field(..., min_length=1, max_length=500, description="Reminder title")
    description: str | None = Field(None, max_length=4000, description="Reminder body")
    date_time: str = Field(
        ...,
        description="Wall-clock date-time, e.g. 2024-06-01T09:30:00",
    )
    timezone: str = Field(..., description="IANA timezone name, e.g. Asia/Kolkata")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        """Reject titles that are only whitespace."""
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    @field_validator("date_time")
    @classmethod
    def date_time_parses(cls, value: str) -> str:
        """Reject date-times the scheduler could never evaluate."""
        parse_wall_time(value)
        return value

    @field_validator("timezone")
    @classmethod
    def timezone_known(cls, value: str) -> str:
        """Reject unknown timezone names."""
        resolve_timezone(value)
        return value


class CreateReminderRequest(ReminderFields):
    """Request model for creating a reminder."""


class UpdateReminderRequest(ReminderFields):
    """Request model for replacing a pending reminder's fields."""


class ReminderListResponse(BaseModel):
    """Response model for listing reminders."""

    results: list[ReminderResponse] = Field(default_factory=list)
    total: int = Field(..., description="Number of reminders returned")
