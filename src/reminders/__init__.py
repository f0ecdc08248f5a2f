"""Reminder scheduling and dispatch.

Run the scheduler loop with: python -m src.reminders
"""

from src.reminders.dispatcher import DispatchResult, NotificationDispatcher, ReminderNotifier
from src.reminders.scheduler import ReminderScheduler, TickResult
from src.reminders.selector import DueReminderSelector, SelectionResult
from src.reminders.store import (
    PendingReminder,
    Recipient,
    ReminderStore,
    SqlAlchemyReminderStore,
)
from src.reminders.timezones import ReminderTimeError, is_due, to_instant, to_server_time

__all__ = [
    "DispatchResult",
    "DueReminderSelector",
    "NotificationDispatcher",
    "PendingReminder",
    "Recipient",
    "ReminderNotifier",
    "ReminderScheduler",
    "ReminderStore",
    "ReminderTimeError",
    "SelectionResult",
    "SqlAlchemyReminderStore",
    "TickResult",
    "is_due",
    "to_instant",
    "to_server_time",
]
