"""SQLAlchemy ORM models for user reminders."""

import uuid as uuid_module
from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.core import Base, TimestampMixin
from src.database.users.models import User

# Maximum length of title to show in repr
REPR_TITLE_MAX_LENGTH = 50


class ReminderStatus(StrEnum):
    """Delivery status of a reminder."""

    PENDING = "pending"  # Waiting for its time to come
    IN_FLIGHT = "in_flight"  # Claimed by a tick and submitted to the gateway
    COMPLETED = "completed"  # Gateway confirmed delivery
    FAILED = "failed"  # Gateway rejected delivery

    @property
    def is_terminal(self) -> bool:
        """Check if no further transitions are possible from this status."""
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, target: "ReminderStatus") -> bool:
        """Check if moving from this status to target is allowed.

        :param target: The requested status.
        :returns: True if the transition is legal.
        """
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[ReminderStatus, frozenset[ReminderStatus]] = {
    ReminderStatus.PENDING: frozenset(
        {ReminderStatus.IN_FLIGHT, ReminderStatus.COMPLETED, ReminderStatus.FAILED}
    ),
    ReminderStatus.IN_FLIGHT: frozenset(
        {ReminderStatus.PENDING, ReminderStatus.COMPLETED, ReminderStatus.FAILED}
    ),
    ReminderStatus.COMPLETED: frozenset(),
    ReminderStatus.FAILED: frozenset(),
}


class Reminder(TimestampMixin, Base):
    """ORM model for a timed reminder.

    ``date_time`` is a wall-clock value interpreted in ``timezone``; it is
    not an absolute instant on its own. The scheduler converts it before
    comparing against the current time.
    """

    __tablename__ = "reminders"

    id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid_module.uuid4,
    )
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    timezone: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    date_time: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReminderStatus.PENDING.value,
    )
    status_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    user_id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    user: Mapped[User] = relationship(
        User,
        back_populates="reminders",
    )

    __table_args__ = (
        Index("idx_reminders_status", "status"),
        Index("idx_reminders_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        """Return string representation of the reminder."""
        if len(self.title) > REPR_TITLE_MAX_LENGTH:
            title_preview = self.title[:REPR_TITLE_MAX_LENGTH] + "..."
        else:
            title_preview = self.title
        return (
            f"<Reminder(id={self.id}, title={title_preview!r}, "
            f"at={self.date_time} {self.timezone}, status={self.status})>"
        )
