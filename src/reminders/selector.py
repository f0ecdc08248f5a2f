"""Selection of reminders that are due for delivery."""

from __future__ import annotations

import logging
import uuid as uuid_module
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from src.messaging.whatsapp.models import ReminderInput
from src.reminders.store import PendingReminder, Recipient, ReminderStore
from src.reminders.timezones import ReminderTimeError, is_due

logger = logging.getLogger(__name__)


@dataclass
class SelectionResult:
    """Outcome of one selection pass."""

    due: list[ReminderInput] = field(default_factory=list)
    pending_checked: int = 0
    not_yet_due: int = 0
    skipped_no_recipient: int = 0
    skipped_invalid_time: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def due_ids(self) -> list[uuid_module.UUID]:
        """IDs of the due reminders, in batch order."""
        return [uuid_module.UUID(item.reminder_id) for item in self.due]


class DueReminderSelector:
    """Find pending reminders whose time has come and resolve their recipients.

    Every reminder is handled in isolation: a bad date-time, an unknown
    timezone or a missing user only drops that reminder from this tick. Its
    status stays pending, so it is looked at again on the next tick.
    """

    def __init__(
        self,
        store: ReminderStore,
        server_timezone: tzinfo,
        *,
        require_verified: bool = False,
    ) -> None:
        """Initialise the selector.

        :param store: Reminder store to read from.
        :param server_timezone: Timezone the server compares instants in.
        :param require_verified: Skip users whose WhatsApp number is unverified.
        """
        self._store = store
        self._server_timezone = server_timezone
        self._require_verified = require_verified

    def select(self, now: datetime) -> SelectionResult:
        """Build the dispatch batch for this tick.

        :param now: Current server time.
        :returns: The due batch and per-reason skip counts.
        """
        result = SelectionResult()
        pending = self._store.get_pending_reminders()
        result.pending_checked = len(pending)
        logger.info(f"Checking {len(pending)} pending reminders")

        recipients: dict[uuid_module.UUID, Recipient | None] = {}
        seen: set[uuid_module.UUID] = set()

        for reminder in pending:
            if reminder.id in seen:
                continue
            seen.add(reminder.id)

            try:
                entry = self._select_one(reminder, now, recipients, result)
            except Exception as e:
                error_msg = f"Failed to evaluate reminder {reminder.id}: {e}"
                logger.exception(error_msg)
                result.errors.append(error_msg)
                continue

            if entry is not None:
                result.due.append(entry)

        logger.info(
            f"Selection complete: due={len(result.due)}, "
            f"not_yet_due={result.not_yet_due}, "
            f"no_recipient={result.skipped_no_recipient}, "
            f"invalid_time={result.skipped_invalid_time}, "
            f"errors={len(result.errors)}"
        )
        return result

    def _select_one(
        self,
        reminder: PendingReminder,
        now: datetime,
        recipients: dict[uuid_module.UUID, Recipient | None],
        result: SelectionResult,
    ) -> ReminderInput | None:
        """Decide whether one reminder goes into the batch.

        :param reminder: The pending reminder.
        :param now: Current server time.
        :param recipients: Per-tick cache of looked-up users.
        :param result: Selection result to record skips on.
        :returns: The gateway entry, or None if the reminder is skipped.
        """
        try:
            due = is_due(reminder.date_time, reminder.timezone, now, self._server_timezone)
        except ReminderTimeError as e:
            logger.warning(f"Skipping reminder {reminder.id}: {e}")
            result.skipped_invalid_time += 1
            return None

        if not due:
            result.not_yet_due += 1
            return None

        if reminder.user_id not in recipients:
            recipients[reminder.user_id] = self._store.get_recipient(reminder.user_id)
        recipient = recipients[reminder.user_id]

        if recipient is None or not recipient.whatsapp_number:
            logger.warning(
                f"Skipping reminder {reminder.id}: user {reminder.user_id} has no WhatsApp number"
            )
            result.skipped_no_recipient += 1
            return None

        if self._require_verified and not recipient.is_verified:
            logger.warning(
                f"Skipping reminder {reminder.id}: WhatsApp number of user "
                f"{reminder.user_id} is not verified"
            )
            result.skipped_no_recipient += 1
            return None

        return ReminderInput(
            reminder_id=str(reminder.id),
            whatsapp_number=recipient.whatsapp_number,
            title=reminder.title,
            description=reminder.description or "",
        )
