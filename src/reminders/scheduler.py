"""Fixed-interval scheduler that selects and dispatches due reminders."""

from __future__ import annotations

import logging
import signal
import sys
import threading
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, tzinfo
from types import FrameType

from dotenv import load_dotenv

from src.database.connection import dispose_engine
from src.messaging.whatsapp.client import WhatsAppGatewayClient
from src.messaging.whatsapp.config import get_whatsapp_settings
from src.observability.sentry import init_sentry
from src.paths import ENV_FILE
from src.reminders.config import ReminderSchedulerConfig, get_reminder_settings
from src.reminders.dispatcher import NotificationDispatcher, ReminderNotifier
from src.reminders.selector import DueReminderSelector
from src.reminders.store import ReminderStore, SqlAlchemyReminderStore
from src.reminders.timezones import get_server_timezone
from src.utils.logging import configure_logging

logger = logging.getLogger(__name__)

# Default seconds between ticks
DEFAULT_TICK_INTERVAL_SECONDS = 60

# Default age after which an in-flight claim is considered abandoned
DEFAULT_CLAIM_TIMEOUT = timedelta(minutes=10)


@dataclass
class TickResult:
    """Summary of one scheduler tick."""

    started_at: datetime
    stale_released: int = 0
    pending_checked: int = 0
    due: int = 0
    completed: int = 0
    failed: int = 0
    released: int = 0
    skipped: int = 0
    batch_failed: bool = False
    errors: list[str] = field(default_factory=list)


class ReminderScheduler:
    """Run the select -> dispatch pipeline on a fixed interval.

    Ticks never overlap within a process: a tick that starts while another is
    still running is refused. Errors are contained at the smallest scope
    (reminder, then batch, then tick), so one bad tick never stops the loop.
    """

    def __init__(
        self,
        store: ReminderStore,
        notifier: ReminderNotifier,
        *,
        interval_seconds: int = DEFAULT_TICK_INTERVAL_SECONDS,
        server_timezone: tzinfo | None = None,
        claim_timeout: timedelta = DEFAULT_CLAIM_TIMEOUT,
        require_verified: bool = False,
    ) -> None:
        """Initialise the scheduler.

        :param store: Reminder store.
        :param notifier: Gateway client used to deliver batches.
        :param interval_seconds: Seconds between ticks.
        :param server_timezone: Timezone to compare instants in. Host local time if None.
        :param claim_timeout: Age after which an in-flight claim is released.
        :param require_verified: Only deliver to users with a verified WhatsApp number.
        """
        if interval_seconds < 1:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self._store = store
        self._interval_seconds = interval_seconds
        self._server_timezone = server_timezone or get_server_timezone()
        self._claim_timeout = claim_timeout
        self._selector = DueReminderSelector(
            store,
            self._server_timezone,
            require_verified=require_verified,
        )
        self._dispatcher = NotificationDispatcher(store, notifier)
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()

    @classmethod
    def from_settings(
        cls,
        settings: ReminderSchedulerConfig | None = None,
        store: ReminderStore | None = None,
        notifier: ReminderNotifier | None = None,
    ) -> ReminderScheduler:
        """Build a scheduler from environment configuration.

        :param settings: Scheduler settings. Loaded from env if not provided.
        :param store: Reminder store. Database-backed if not provided.
        :param notifier: Gateway client. Built from env if not provided.
        :returns: A configured scheduler.
        """
        settings = settings or get_reminder_settings()
        return cls(
            store or SqlAlchemyReminderStore(),
            notifier or WhatsAppGatewayClient.from_settings(get_whatsapp_settings()),
            interval_seconds=settings.tick_interval_seconds,
            server_timezone=get_server_timezone(settings.server_timezone),
            claim_timeout=timedelta(minutes=settings.claim_timeout_minutes),
            require_verified=settings.require_verified_whatsapp,
        )

    @property
    def interval_seconds(self) -> int:
        """Seconds between ticks."""
        return self._interval_seconds

    def tick(self, now: datetime | None = None) -> TickResult | None:
        """Run one select -> dispatch pass.

        :param now: Current time. Defaults to now in the server timezone.
        :returns: The tick summary, or None if another tick is still running.
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("Previous reminder tick still running, skipping this one")
            return None

        try:
            if now is None:
                now = datetime.now(self._server_timezone)
            elif now.tzinfo is None:
                now = now.replace(tzinfo=self._server_timezone)
            result = TickResult(started_at=now)

            try:
                self._run_tick(now, result)
            except Exception as e:
                error_msg = f"Reminder tick failed: {e}"
                logger.exception(error_msg)
                result.errors.append(error_msg)

            logger.info(
                f"Reminder tick complete: pending={result.pending_checked}, due={result.due}, "
                f"completed={result.completed}, failed={result.failed}, "
                f"released={result.released}, skipped={result.skipped}, "
                f"errors={len(result.errors)}"
            )
            return result

        finally:
            self._tick_lock.release()

    def _run_tick(self, now: datetime, result: TickResult) -> None:
        """Execute the tick pipeline, recording progress on ``result``.

        :param now: Current server time.
        :param result: Tick summary to fill in.
        """
        logger.info(f"Starting reminder tick at {now.isoformat()}")

        claimed_before = now.astimezone(UTC) - self._claim_timeout
        result.stale_released = self._store.release_stale_claims(claimed_before)

        selection = self._selector.select(now)
        result.pending_checked = selection.pending_checked
        result.due = len(selection.due)
        result.skipped = selection.skipped_no_recipient + selection.skipped_invalid_time
        result.errors.extend(selection.errors)

        dispatch = self._dispatcher.dispatch(selection.due, now)
        result.completed = dispatch.completed
        result.failed = dispatch.failed
        result.released = dispatch.released
        result.batch_failed = dispatch.batch_failed
        result.errors.extend(dispatch.errors)

    def run(self) -> None:
        """Tick on a fixed interval until stop() is called.

        Each tick starts one interval after the previous one started. If a
        tick overruns the interval, the missed slots are dropped rather than
        run back to back.
        """
        self._stop_event.clear()
        logger.info(
            f"Starting reminder scheduler: interval={self._interval_seconds}s, "
            f"server_timezone={self._server_timezone}"
        )

        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            self.tick()

            next_tick += self._interval_seconds
            now = time.monotonic()
            if next_tick <= now:
                skipped = int((now - next_tick) // self._interval_seconds) + 1
                logger.warning(f"Reminder tick overran the interval, dropping {skipped} slot(s)")
                next_tick += skipped * self._interval_seconds

            self._stop_event.wait(next_tick - now)

        logger.info("Reminder scheduler stopped")

    def stop(self) -> None:
        """Signal the loop to stop after the current tick."""
        logger.info("Stopping reminder scheduler...")
        self._stop_event.set()

    def install_signal_handlers(self) -> None:
        """Stop the loop on SIGINT or SIGTERM."""

        def signal_handler(signum: int, frame: FrameType | None) -> None:
            logger.info(f"Received shutdown signal: {signal.Signals(signum).name}")
            self.stop()

        signal.signal(signal.SIGINT, signal_handler)
        if sys.platform != "win32":
            signal.signal(signal.SIGTERM, signal_handler)


def main() -> None:
    """Entry point for running the reminder scheduler."""
    load_dotenv(ENV_FILE)
    configure_logging()
    init_sentry()
    scheduler = ReminderScheduler.from_settings()
    scheduler.install_signal_handlers()
    try:
        scheduler.run()
    finally:
        dispose_engine()


if __name__ == "__main__":
    main()
