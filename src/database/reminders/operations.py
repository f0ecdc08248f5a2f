"""Database operations for user reminders."""

from __future__ import annotations

import logging
import uuid as uuid_module
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from src.database.reminders.models import Reminder, ReminderStatus

logger = logging.getLogger(__name__)

# Default page size when listing reminders for a user
DEFAULT_LIST_LIMIT = 100


class InvalidStatusTransitionError(ValueError):
    """Raised when a reminder status change would break the status lifecycle."""

    def __init__(
        self,
        reminder_id: uuid_module.UUID,
        current: ReminderStatus,
        target: ReminderStatus,
    ) -> None:
        """Initialise the error.

        :param reminder_id: The reminder that was being updated.
        :param current: Its current status.
        :param target: The rejected target status.
        """
        self.reminder_id = reminder_id
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move reminder {reminder_id} from {current.value} to {target.value}"
        )


def create_reminder(
    session: Session,
    user_id: uuid_module.UUID,
    title: str,
    date_time: str,
    timezone: str,
    description: str | None = None,
) -> Reminder:
    """Create a new pending reminder.

    :param session: Database session.
    :param user_id: Owning user ID.
    :param title: Reminder title.
    :param date_time: Wall-clock date-time in ``timezone``.
    :param timezone: IANA timezone name.
    :param description: Optional description.
    :returns: The created reminder.
    """
    reminder = Reminder(
        user_id=user_id,
        title=title,
        description=description,
        date_time=date_time,
        timezone=timezone,
        status=ReminderStatus.PENDING.value,
    )
    session.add(reminder)
    session.flush()
    logger.info(
        f"Created reminder: id={reminder.id}, user_id={user_id}, "
        f"at={date_time} {timezone}"
    )
    return reminder


def get_reminder_by_id(
    session: Session,
    reminder_id: uuid_module.UUID,
    user_id: uuid_module.UUID | None = None,
) -> Reminder | None:
    """Get a reminder by ID, optionally scoped to its owner.

    :param session: Database session.
    :param reminder_id: Reminder ID.
    :param user_id: If given, only return the reminder when owned by this user.
    :returns: The reminder or None if not found.
    """
    query = session.query(Reminder).filter(Reminder.id == reminder_id)
    if user_id is not None:
        query = query.filter(Reminder.user_id == user_id)
    return query.first()


def list_reminders_for_user(
    session: Session,
    user_id: uuid_module.UUID,
    status: ReminderStatus | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[Reminder]:
    """List reminders owned by a user, newest first.

    :param session: Database session.
    :param user_id: Owning user ID.
    :param status: Optional status filter.
    :param limit: Maximum number of reminders to return.
    :returns: List of reminders.
    """
    query = session.query(Reminder).filter(Reminder.user_id == user_id)

    if status is not None:
        query = query.filter(Reminder.status == status.value)

    return query.order_by(Reminder.created_at.desc()).limit(limit).all()


def update_reminder(
    session: Session,
    reminder: Reminder,
    *,
    title: str,
    date_time: str,
    timezone: str,
    description: str | None = None,
) -> Reminder:
    """Replace the editable fields of a reminder.

    Status is left untouched; callers decide whether the reminder may be
    edited in its current status.

    :param session: Database session.
    :param reminder: The reminder to update.
    :param title: New title.
    :param date_time: New wall-clock date-time.
    :param timezone: New IANA timezone name.
    :param description: New description.
    :returns: The updated reminder.
    """
    reminder.title = title
    reminder.date_time = date_time
    reminder.timezone = timezone
    reminder.description = description
    session.flush()
    logger.info(f"Updated reminder: id={reminder.id}, at={date_time} {timezone}")
    return reminder


def delete_reminder(session: Session, reminder: Reminder) -> None:
    """Delete a reminder.

    :param session: Database session.
    :param reminder: The reminder to delete.
    """
    session.delete(reminder)
    session.flush()
    logger.info(f"Deleted reminder: id={reminder.id}")


def get_pending_reminders(session: Session) -> list[Reminder]:
    """Get every reminder still waiting to be sent.

    No time filter is applied here: ``date_time`` is zone-relative, so due
    checks happen after timezone normalisation.

    :param session: Database session.
    :returns: List of pending reminders in storage order.
    """
    return (
        session.query(Reminder)
        .filter(Reminder.status == ReminderStatus.PENDING.value)
        .all()
    )


def claim_reminders(
    session: Session,
    reminder_ids: Sequence[uuid_module.UUID],
    now: datetime,
) -> list[uuid_module.UUID]:
    """Move pending reminders to in-flight.

    The update is conditional on the reminder still being pending, so two
    concurrent claimers can never both win the same reminder.

    :param session: Database session.
    :param reminder_ids: Reminders to claim.
    :param now: Claim timestamp.
    :returns: IDs of the reminders actually claimed.
    """
    if not reminder_ids:
        return []

    stmt = (
        update(Reminder)
        .where(
            Reminder.id.in_(list(reminder_ids)),
            Reminder.status == ReminderStatus.PENDING.value,
        )
        .values(status=ReminderStatus.IN_FLIGHT.value, claimed_at=now)
        .returning(Reminder.id)
        .execution_options(synchronize_session=False)
    )
    claimed = list(session.execute(stmt).scalars())
    logger.debug(f"Claimed {len(claimed)}/{len(reminder_ids)} reminders")
    return claimed


def release_reminders(
    session: Session,
    reminder_ids: Sequence[uuid_module.UUID],
) -> int:
    """Return in-flight reminders to pending so the next tick retries them.

    :param session: Database session.
    :param reminder_ids: Reminders to release.
    :returns: Number of reminders released.
    """
    if not reminder_ids:
        return 0

    stmt = (
        update(Reminder)
        .where(
            Reminder.id.in_(list(reminder_ids)),
            Reminder.status == ReminderStatus.IN_FLIGHT.value,
        )
        .values(status=ReminderStatus.PENDING.value, claimed_at=None)
        .execution_options(synchronize_session=False)
    )
    released = session.execute(stmt).rowcount
    logger.debug(f"Released {released} reminders back to pending")
    return released


def release_stale_claims(session: Session, claimed_before: datetime) -> int:
    """Release in-flight reminders whose claim is older than a cutoff.

    Recovers reminders claimed by a tick that never finished.

    :param session: Database session.
    :param claimed_before: Claims older than this are released.
    :returns: Number of reminders released.
    """
    stmt = (
        update(Reminder)
        .where(
            Reminder.status == ReminderStatus.IN_FLIGHT.value,
            Reminder.claimed_at < claimed_before,
        )
        .values(status=ReminderStatus.PENDING.value, claimed_at=None)
        .execution_options(synchronize_session=False)
    )
    released = session.execute(stmt).rowcount
    if released:
        logger.warning(f"Released {released} stale in-flight reminders")
    return released


def set_reminder_status(
    session: Session,
    reminder_id: uuid_module.UUID,
    status: ReminderStatus,
    message: str | None = None,
) -> Reminder | None:
    """Apply a status change to a reminder.

    :param session: Database session.
    :param reminder_id: Reminder ID.
    :param status: Target status.
    :param message: Optional message to record with the change.
    :returns: The updated reminder or None if not found.
    :raises InvalidStatusTransitionError: If the transition is not allowed.
    """
    reminder = get_reminder_by_id(session, reminder_id)
    if reminder is None:
        return None

    current = ReminderStatus(reminder.status)
    if not current.can_transition_to(status):
        raise InvalidStatusTransitionError(reminder_id, current, status)

    reminder.status = status.value
    reminder.status_message = message
    reminder.claimed_at = None
    session.flush()
    logger.info(f"Reminder status changed: id={reminder_id}, {current.value} -> {status.value}")
    return reminder
