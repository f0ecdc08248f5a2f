"""Database operations for users."""

from __future__ import annotations

import logging
import uuid as uuid_module

from sqlalchemy.orm import Session

from src.database.users.models import User

logger = logging.getLogger(__name__)


def get_user_by_id(session: Session, user_id: uuid_module.UUID) -> User | None:
    """Get a user by ID.

    :param session: Database session.
    :param user_id: User ID.
    :returns: The user or None if not found.
    """
    return session.query(User).filter(User.id == user_id).first()


def get_user_by_whatsapp_number(session: Session, whatsapp_number: str) -> User | None:
    """Get the user that owns a WhatsApp number.

    :param session: Database session.
    :param whatsapp_number: WhatsApp number as registered on the profile.
    :returns: The user or None if no user has this number.
    """
    return session.query(User).filter(User.whatsapp_number == whatsapp_number).first()


def update_user(
    session: Session,
    user: User,
    *,
    name: str | None = None,
    email: str | None = None,
    preferred_timezone: str | None = None,
    whatsapp_number: str | None = None,
) -> User:
    """Update profile fields on a user.

    Fields left as None are unchanged. Changing the WhatsApp number clears
    the verified flag, since verification belongs to a specific number.

    :param session: Database session.
    :param user: The user to update.
    :param name: New display name.
    :param email: New email address.
    :param preferred_timezone: New preferred IANA timezone.
    :param whatsapp_number: New WhatsApp number.
    :returns: The updated user.
    """
    if name is not None:
        user.name = name
    if email is not None:
        user.email = email
    if preferred_timezone is not None:
        user.preferred_timezone = preferred_timezone
    if whatsapp_number is not None and whatsapp_number != user.whatsapp_number:
        user.whatsapp_number = whatsapp_number
        user.is_whatsapp_verified = False
        logger.info(f"WhatsApp number changed, verification reset: user_id={user.id}")

    session.flush()
    logger.info(f"Updated user: id={user.id}")
    return user


def mark_whatsapp_verified(session: Session, whatsapp_number: str) -> User | None:
    """Mark the WhatsApp number of a user as verified.

    Idempotent: an already verified user is returned unchanged.

    :param session: Database session.
    :param whatsapp_number: The number that answered the verification poll.
    :returns: The verified user or None if no user has this number.
    """
    user = get_user_by_whatsapp_number(session, whatsapp_number)
    if user is None:
        return None

    if user.is_whatsapp_verified:
        logger.debug(f"User already verified: id={user.id}")
        return user

    user.is_whatsapp_verified = True
    session.flush()
    logger.info(f"Verified WhatsApp number for user: id={user.id}")
    return user
