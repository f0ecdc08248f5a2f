"""Pydantic models for user API endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.reminders.timezones import resolve_timezone

# E.164 numbers are at most 15 digits, plus the leading "+"
WHATSAPP_NUMBER_PATTERN = r"^\+?[0-9]{6,15}$"


class UserResponse(BaseModel):
    """Response model for a user profile."""

    id: UUID = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    whatsapp_number: str | None = Field(None, description="WhatsApp number")
    is_whatsapp_verified: bool = Field(..., description="Whether the number has been verified")
    preferred_timezone: str | None = Field(None, description="Default IANA timezone")
    created_at: datetime = Field(..., description="When the user was created")


class UpdateUserRequest(BaseModel):
    """Request model for updating a user profile. Omitted fields are unchanged."""

    name: str | None = Field(None, min_length=1, max_length=200, description="Display name")
    email: str | None = Field(None, min_length=3, max_length=320, description="Email address")
    whatsapp_number: str | None = Field(
        None,
        pattern=WHATSAPP_NUMBER_PATTERN,
        description="WhatsApp number; changing it clears verification",
    )
    preferred_timezone: str | None = Field(None, description="Default IANA timezone")

    @field_validator("preferred_timezone")
    @classmethod
    def timezone_known(cls, value: str | None) -> str | None:
        """Reject unknown timezone names."""
        if value is not None:
            resolve_timezone(value)
        return value


class VerificationResponse(BaseModel):
    """Response model for a WhatsApp verification request."""

    poll_sent: bool = Field(..., description="Whether a verification poll was sent")
    is_whatsapp_verified: bool = Field(..., description="Current verification state")
    message: str = Field(..., description="Human readable outcome")
