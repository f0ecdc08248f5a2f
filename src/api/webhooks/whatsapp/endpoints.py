"""Inbound webhooks from the WhatsApp gateway."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.security import verify_webhook_token
from src.api.webhooks.whatsapp.models import (
    DEFAULT_BOT_REMINDER_TIMEZONE,
    DEFAULT_BOT_REMINDER_TITLE,
    BotReminderRequest,
    VerificationCallback,
    WebhookResponse,
)
from src.database.connection import get_session
from src.database.reminders import create_reminder
from src.database.users import get_user_by_whatsapp_number, mark_whatsapp_verified

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/whatsapp",
    tags=["Webhooks"],
    dependencies=[Depends(verify_webhook_token)],
)


@router.post(
    "/verification",
    response_model=WebhookResponse,
    summary="Receive verification poll answer",
)
def receive_verification(callback: VerificationCallback) -> WebhookResponse:
    """Mark the number that answered a verification poll as verified."""
    logger.info(f"Verification answer received: body={callback.message_body!r}")

    with get_session() as session:
        user = mark_whatsapp_verified(session, callback.user_phone_number)
        if user is None:
            logger.warning("Verification answer from an unknown WhatsApp number")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No user has this WhatsApp number",
            )
        user_id = user.id

    logger.info(f"WhatsApp number verified: user_id={user_id}")
    return WebhookResponse(success=True, message="WhatsApp number verified")


@router.post(
    "/reminders",
    response_model=WebhookResponse,
    summary="Create reminder from bot message",
)
def create_bot_reminder(request: BotReminderRequest) -> WebhookResponse:
    """Create a reminder for the user who owns the sending WhatsApp number.

    Messages the bot did not classify as reminders are acknowledged without
    creating anything.
    """
    if not request.is_reminder:
        return WebhookResponse(success=False, message="Message is not a reminder")

    if not request.reminder_date_time:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="reminderDateTime is required",
        )

    with get_session() as session:
        user = get_user_by_whatsapp_number(session, request.whatsapp_number)
        if user is None:
            logger.warning("Bot reminder from an unknown WhatsApp number")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )

        timezone = request.time_zone or user.preferred_timezone or DEFAULT_BOT_REMINDER_TIMEZONE
        reminder = create_reminder(
            session=session,
            user_id=user.id,
            title=request.reminder_title or DEFAULT_BOT_REMINDER_TITLE,
            date_time=request.reminder_date_time,
            timezone=timezone,
            description=request.reminder_description,
        )
        reminder_id = reminder.id

    logger.info(f"Bot reminder created: id={reminder_id}, timezone={timezone}")
    return WebhookResponse(success=True, message="Reminder created", reminder_id=reminder_id)
