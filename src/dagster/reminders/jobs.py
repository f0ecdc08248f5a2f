"""Dagster jobs for sending due reminders."""

from dagster import job
from src.dagster.reminders.ops import process_reminders_op


@job(
    name="process_reminders_job",
    description="Send due reminders over WhatsApp (runs every minute).",
)
def process_reminders_job() -> None:
    """Process reminders job.

    Selects pending reminders whose time has come and submits them to the
    gateway as a single batch.
    """
    process_reminders_op()
