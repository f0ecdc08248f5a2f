"""SQLAlchemy ORM model for application users."""

import uuid as uuid_module
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.core import Base, TimestampMixin

if TYPE_CHECKING:
    from src.database.reminders.models import Reminder


class User(TimestampMixin, Base):
    """ORM model for a user who receives reminders on WhatsApp.

    The WhatsApp number is the delivery address used by the reminder
    dispatcher. It is unique across users and may be unset until the user
    completes their profile.
    """

    __tablename__ = "users"

    id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid_module.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
    )
    whatsapp_number: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        unique=True,
    )
    is_whatsapp_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    preferred_timezone: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    reminders: Mapped[list["Reminder"]] = relationship(
        "Reminder",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """Return string representation of the user."""
        return (
            f"<User(id={self.id}, email={self.email!r}, "
            f"verified={self.is_whatsapp_verified})>"
        )

