"""Database models and session management.

Both models are imported here so the User <-> Reminder relationship resolves
whichever subpackage is imported first.
"""

from src.database.reminders.models import Reminder, ReminderStatus
from src.database.users.models import User

__all__ = ["Reminder", "ReminderStatus", "User"]
