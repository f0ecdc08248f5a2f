"""Dagster code location for the reminder scheduler.

Loaded with ``dagster dev -m src.dagster.definitions``. The schedule runs the
same tick as the standalone scheduler, so only one of the two should be
enabled against a given database.
"""

from dagster import Definitions
from src.dagster.reminders import process_reminders_job, process_reminders_schedule
from src.dagster.resources import WhatsAppGatewayResource
from src.observability.sentry import init_sentry
from src.utils.logging import configure_logging

configure_logging()
init_sentry()

defs = Definitions(
    jobs=[process_reminders_job],
    schedules=[process_reminders_schedule],
    resources={"whatsapp": WhatsAppGatewayResource()},
)
