"""Dagster ops for sending due reminders."""

from typing import Optional

from dagster import OpExecutionContext, op
from src.dagster.resources import WhatsAppGatewayResource
from src.reminders.scheduler import ReminderScheduler, TickResult

# Maximum number of error messages written to the op log
MAX_ERRORS_IN_LOG = 5


@op(
    name="process_reminders",
    description="Select due reminders and send them to the WhatsApp gateway in one batch.",
)
def process_reminders_op(
    context: OpExecutionContext,
    whatsapp: WhatsAppGatewayResource,
) -> Optional[TickResult]:  # noqa: UP045
    """Run one scheduler tick.

    Reminders are claimed before they are sent, so a run that overlaps the
    previous one never delivers the same reminder twice.

    :param context: Dagster execution context.
    :param whatsapp: Gateway resource used to deliver the batch.
    :returns: The tick summary, or None if a tick was already running in this process.
    """
    context.log.info("Starting reminder processing")
    scheduler = ReminderScheduler.from_settings(notifier=whatsapp.get_client())
    result = scheduler.tick()

    if result is None:
        context.log.warning("Reminder tick skipped: previous tick still running")
        return None

    context.log.info(
        f"Reminder processing complete: "
        f"pending={result.pending_checked}, "
        f"due={result.due}, "
        f"completed={result.completed}, "
        f"failed={result.failed}, "
        f"released={result.released}, "
        f"errors={len(result.errors)}"
    )

    for error in result.errors[:MAX_ERRORS_IN_LOG]:
        context.log.error(error)
    if len(result.errors) > MAX_ERRORS_IN_LOG:
        context.log.error(f"... and {len(result.errors) - MAX_ERRORS_IN_LOG} more errors")

    return result
