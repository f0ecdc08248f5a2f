"""Reminder store interface used by the scheduler, and its database implementation."""

from __future__ import annotations

import logging
import uuid as uuid_module
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session

from src.database.connection import get_session
from src.database.reminders import (
    Reminder,
    ReminderStatus,
    claim_reminders,
    get_pending_reminders,
    release_reminders,
    release_stale_claims,
    set_reminder_status,
)
from src.database.users import get_user_by_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingReminder:
    """Snapshot of a pending reminder, detached from any database session."""

    id: uuid_module.UUID
    user_id: uuid_module.UUID
    title: str
    description: str | None
    date_time: str
    timezone: str

    @classmethod
    def from_model(cls, reminder: Reminder) -> PendingReminder:
        """Build a snapshot from an ORM reminder.

        :param reminder: The ORM reminder.
        :returns: The snapshot.
        """
        return cls(
            id=reminder.id,
            user_id=reminder.user_id,
            title=reminder.title,
            description=reminder.description,
            date_time=reminder.date_time,
            timezone=reminder.timezone,
        )


@dataclass(frozen=True)
class Recipient:
    """Delivery address of a reminder owner."""

    whatsapp_number: str | None
    is_verified: bool = False


class ReminderStore(Protocol):
    """Persistence operations the scheduler needs."""

    def get_pending_reminders(self) -> list[PendingReminder]:
        """Return every reminder with status pending."""
        ...

    def get_recipient(self, user_id: uuid_module.UUID) -> Recipient | None:
        """Return the delivery address of a user, or None if the user is unknown."""
        ...

    def claim_reminders(
        self,
        reminder_ids: Sequence[uuid_module.UUID],
        now: datetime,
    ) -> list[uuid_module.UUID]:
        """Move still-pending reminders to in-flight and return the ones claimed."""
        ...

    def release_reminders(self, reminder_ids: Sequence[uuid_module.UUID]) -> int:
        """Return in-flight reminders to pending."""
        ...

    def release_stale_claims(self, claimed_before: datetime) -> int:
        """Return in-flight reminders claimed before a cutoff to pending."""
        ...

    def update_status(
        self,
        reminder_id: uuid_module.UUID,
        status: ReminderStatus,
        message: str | None = None,
    ) -> bool:
        """Set a reminder's status. Returns False if the reminder no longer exists."""
        ...


class SqlAlchemyReminderStore:
    """Reminder store backed by the application database.

    Each call runs in its own transaction, so a failure on one reminder never
    rolls back work already done for another.
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractContextManager[Session]] = get_session,
    ) -> None:
        """Initialise the store.

        :param session_factory: Returns a transactional session context manager.
        """
        self._session_factory = session_factory

    def get_pending_reminders(self) -> list[PendingReminder]:
        """Return every reminder with status pending.

        :returns: Detached snapshots in storage order.
        """
        with self._session_factory() as session:
            return [PendingReminder.from_model(r) for r in get_pending_reminders(session)]

    def get_recipient(self, user_id: uuid_module.UUID) -> Recipient | None:
        """Return the delivery address of a user.

        :param user_id: User ID.
        :returns: The recipient, or None if the user does not exist.
        """
        with self._session_factory() as session:
            user = get_user_by_id(session, user_id)
            if user is None:
                return None
            return Recipient(
                whatsapp_number=user.whatsapp_number,
                is_verified=user.is_whatsapp_verified,
            )

    def claim_reminders(
        self,
        reminder_ids: Sequence[uuid_module.UUID],
        now: datetime,
    ) -> list[uuid_module.UUID]:
        """Move still-pending reminders to in-flight.

        :param reminder_ids: Reminders to claim.
        :param now: Claim timestamp.
        :returns: IDs actually claimed.
        """
        with self._session_factory() as session:
            return claim_reminders(session, reminder_ids, now)

    def release_reminders(self, reminder_ids: Sequence[uuid_module.UUID]) -> int:
        """Return in-flight reminders to pending.

        :param reminder_ids: Reminders to release.
        :returns: Number released.
        """
        with self._session_factory() as session:
            return release_reminders(session, reminder_ids)

    def release_stale_claims(self, claimed_before: datetime) -> int:
        """Return stale in-flight reminders to pending.

        :param claimed_before: Claims older than this are released.
        :returns: Number released.
        """
        with self._session_factory() as session:
            return release_stale_claims(session, claimed_before)

    def update_status(
        self,
        reminder_id: uuid_module.UUID,
        status: ReminderStatus,
        message: str | None = None,
    ) -> bool:
        """Set a reminder's status.

        :param reminder_id: Reminder ID.
        :param status: Target status.
        :param message: Optional message recorded with the change.
        :returns: False if the reminder no longer exists.
        :raises InvalidStatusTransitionError: If the transition is not allowed.
        """
        with self._session_factory() as session:
            reminder = set_reminder_status(session, reminder_id, status, message)
            if reminder is None:
                logger.warning(f"Reminder disappeared before status update: id={reminder_id}")
                return False
            return True
