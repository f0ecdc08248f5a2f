"""Database models and operations for user reminders."""

from src.database.reminders.models import (
    ALLOWED_TRANSITIONS,
    Reminder,
    ReminderStatus,
)
from src.database.reminders.operations import (
    DEFAULT_LIST_LIMIT,
    InvalidStatusTransitionError,
    claim_reminders,
    create_reminder,
    delete_reminder,
    get_pending_reminders,
    get_reminder_by_id,
    list_reminders_for_user,
    release_reminders,
    release_stale_claims,
    set_reminder_status,
    update_reminder,
)

__all__ = [
    # Models
    "ALLOWED_TRANSITIONS",
    "Reminder",
    "ReminderStatus",
    # Operations
    "DEFAULT_LIST_LIMIT",
    "InvalidStatusTransitionError",
    "claim_reminders",
    "create_reminder",
    "delete_reminder",
    "get_pending_reminders",
    "get_reminder_by_id",
    "list_reminders_for_user",
    "release_reminders",
    "release_stale_claims",
    "set_reminder_status",
    "update_reminder",
]
