"""Database model and operations for users."""

from src.database.users.models import User
from src.database.users.operations import (
    get_user_by_id,
    get_user_by_whatsapp_number,
    mark_whatsapp_verified,
    update_user,
)

__all__ = [
    # Models
    "User",
    # Operations
    "get_user_by_id",
    "get_user_by_whatsapp_number",
    "mark_whatsapp_verified",
    "update_user",
]
