"""Pydantic models for the WhatsApp delivery gateway."""

from pydantic import BaseModel, ConfigDict, Field


class ReminderInput(BaseModel):
    """A single reminder submitted to the gateway for delivery."""

    model_config = ConfigDict(populate_by_name=True)

    reminder_id: str = Field(..., alias="reminderId")
    whatsapp_number: str = Field(..., alias="whatsappNumber")
    title: str
    description: str = ""


class SendRemindersRequest(BaseModel):
    """Request body for a batched reminder submission."""

    model_config = ConfigDict(populate_by_name=True)

    reminder_input: list[ReminderInput] = Field(..., alias="reminderInput")


class DeliveryResult(BaseModel):
    """Per-reminder delivery outcome reported by the gateway."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str = ""
    reminder_id: str = Field(..., alias="reminderId")


class LoginPollResult(BaseModel):
    """Gateway response to a verification poll request."""

    success: bool
    message: str | None = None
