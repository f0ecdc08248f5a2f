"""Batched submission of due reminders to the WhatsApp gateway."""

from __future__ import annotations

import logging
import uuid as uuid_module
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from src.database.reminders import ReminderStatus
from src.messaging.whatsapp.client import WhatsAppGatewayError
from src.messaging.whatsapp.models import DeliveryResult, ReminderInput
from src.reminders.store import ReminderStore

logger = logging.getLogger(__name__)

# Tries per gateway outcome before giving up on the status write
STATUS_WRITE_ATTEMPTS = 2


class ReminderNotifier(Protocol):
    """Anything that can deliver a batch of reminders."""

    def send_reminders(self, reminders: Sequence[ReminderInput]) -> list[DeliveryResult]:
        """Deliver the batch and report one result per reminder."""
        ...


@dataclass
class DispatchResult:
    """Outcome of one dispatch."""

    submitted: int = 0
    completed: int = 0
    failed: int = 0
    released: int = 0
    not_claimed: int = 0
    batch_failed: bool = False
    errors: list[str] = field(default_factory=list)


def _parse_reminder_id(raw: str) -> uuid_module.UUID | None:
    """Parse a reminder ID echoed by the gateway.

    :param raw: The ID as returned by the gateway.
    :returns: The UUID, or None if it is not a valid UUID.
    """
    try:
        return uuid_module.UUID(raw)
    except ValueError:
        return None


class NotificationDispatcher:
    """Send a tick's due reminders to the gateway and record the outcome.

    Reminders are claimed (pending -> in_flight) before the request so a
    concurrent tick cannot send them again. After the gateway answers, each
    result is applied by reminder ID: success completes the reminder and
    failure fails it. Claimed reminders the gateway did not answer for, and
    the whole batch when the request itself fails, go back to pending.
    """

    def __init__(self, store: ReminderStore, notifier: ReminderNotifier) -> None:
        """Initialise the dispatcher.

        :param store: Reminder store to write statuses to.
        :param notifier: Gateway client that delivers the batch.
        """
        self._store = store
        self._notifier = notifier

    def dispatch(self, batch: Sequence[ReminderInput], now: datetime) -> DispatchResult:
        """Deliver a batch of due reminders.

        :param batch: Gateway entries built by the selector.
        :param now: Current server time, used as the claim timestamp.
        :returns: Counts of completed, failed and released reminders.
        """
        result = DispatchResult()
        if not batch:
            logger.info("No reminders to send")
            return result

        entries = {uuid_module.UUID(entry.reminder_id): entry for entry in batch}
        claimed = set(self._store.claim_reminders(list(entries), now))
        result.not_claimed = len(entries) - len(claimed)
        if result.not_claimed:
            logger.warning(f"{result.not_claimed} reminders were claimed elsewhere, skipping")

        to_send = [entry for reminder_id, entry in entries.items() if reminder_id in claimed]
        if not to_send:
            return result

        result.submitted = len(to_send)

        try:
            responses = self._notifier.send_reminders(to_send)
        except WhatsAppGatewayError as e:
            error_msg = f"Failed to send batch of {len(to_send)} reminders: {e}"
            logger.error(error_msg)
            result.batch_failed = True
            result.errors.append(error_msg)
            result.released = self._store.release_reminders(list(claimed))
            return result
        except Exception:
            self._store.release_reminders(list(claimed))
            raise

        answered = self._apply_results(responses, claimed, result)

        unanswered = [reminder_id for reminder_id in claimed if reminder_id not in answered]
        if unanswered:
            logger.warning(
                f"Gateway did not answer for {len(unanswered)} reminders, "
                f"returning them to pending: {[str(r) for r in unanswered]}"
            )
            result.released = self._store.release_reminders(unanswered)

        logger.info(
            f"Dispatch complete: submitted={result.submitted}, "
            f"completed={result.completed}, failed={result.failed}, "
            f"released={result.released}, errors={len(result.errors)}"
        )
        return result

    def _apply_results(
        self,
        responses: Sequence[DeliveryResult],
        claimed: set[uuid_module.UUID],
        result: DispatchResult,
    ) -> set[uuid_module.UUID]:
        """Apply per-reminder gateway results to the store.

        Results are matched by reminder ID, never by position. Unknown IDs and
        repeated answers for the same reminder are ignored.

        :param responses: Gateway results.
        :param claimed: Reminders sent in this batch.
        :param result: Dispatch result to update.
        :returns: IDs of the reminders that received an answer.
        """
        answered: set[uuid_module.UUID] = set()

        for response in responses:
            reminder_id = _parse_reminder_id(response.reminder_id)
            if reminder_id is None or reminder_id not in claimed:
                logger.warning(
                    f"Ignoring gateway result for unknown reminder {response.reminder_id!r}"
                )
                continue
            if reminder_id in answered:
                logger.warning(f"Ignoring repeated gateway result for reminder {reminder_id}")
                continue
            answered.add(reminder_id)

            status = ReminderStatus.COMPLETED if response.success else ReminderStatus.FAILED
            error = self._record_status(reminder_id, status, response.message or None)
            if error is not None:
                result.errors.append(error)
                continue

            if response.success:
                result.completed += 1
            else:
                result.failed += 1
                logger.info(f"Gateway failed reminder {reminder_id}: {response.message}")

        return answered

    def _record_status(
        self,
        reminder_id: uuid_module.UUID,
        status: ReminderStatus,
        message: str | None,
    ) -> str | None:
        """Write a gateway outcome, retrying once on failure.

        A reminder whose outcome cannot be written stays in_flight, so it is
        released by the stale-claim sweep and delivered again.

        :param reminder_id: The reminder to update.
        :param status: Completed or failed.
        :param message: Gateway message to store.
        :returns: An error message if both attempts failed, otherwise None.
        """
        for attempt in range(1, STATUS_WRITE_ATTEMPTS + 1):
            try:
                self._store.update_status(reminder_id, status, message)
                return None
            except Exception as e:
                if attempt < STATUS_WRITE_ATTEMPTS:
                    logger.warning(
                        f"Retrying {status.value} write for reminder {reminder_id}: {e}"
                    )
                    continue
                error_msg = (
                    f"Failed to record {status.value} for reminder {reminder_id}: {e}. "
                    "It stays in_flight and will be resent after the claim timeout"
                )
                logger.exception(error_msg)
                return error_msg
        return None
