"""Dagster schedules for sending due reminders."""

from dagster import ScheduleDefinition
from src.dagster.reminders.jobs import process_reminders_job

# Check for due reminders every minute
process_reminders_schedule = ScheduleDefinition(
    job=process_reminders_job,
    cron_schedule="* * * * *",
    execution_timezone="UTC",
)
