"""
ScanPlant Backend — Reminder SQLAlchemy Model
===============================================

What:  ORM model for the `reminders` table: user-owned scheduled tasks,
       optionally tied to one of the owner's plants.

Stored vs. derived:
    Only scheduled_at, completed and priority are stored. `overdue`,
    `days_remaining` and the priority label are computed when a response is
    built (see app.schemas.reminder), against the current clock, so they can
    never drift from the stored values.

Plant reference:
    Validated against the owner at write time only. Deleting the plant sets
    plant_id to NULL; the reminder itself survives.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime, utcnow

PRIORITY_LOW = 1
PRIORITY_MEDIUM = 2
PRIORITY_HIGH = 3

PRIORITY_LABELS = {
    PRIORITY_LOW: "Low",
    PRIORITY_MEDIUM: "Medium",
    PRIORITY_HIGH: "High",
}


class Reminder(Base):
    """
    A scheduled reminder.

    Query Patterns:
        - Every query filters on user_id first → idx_reminders_user_scheduled
        - Date buckets (today, next 7 days, overdue) are range scans on
          scheduled_at within one user
    """

    __tablename__ = "reminders"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    scheduled_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        comment="When the reminder is due (UTC)",
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    priority: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=PRIORITY_MEDIUM,
        server_default=text("2"),
        comment="1 = Low, 2 = Medium, 3 = High",
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    plant_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("plants.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("priority BETWEEN 1 AND 3", name="ck_reminders_priority"),
        Index("idx_reminders_user_scheduled", "user_id", "scheduled_at"),
        Index("idx_reminders_plant_id", "plant_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reminder(id={self.id}, title='{self.title}', "
            f"scheduled_at='{self.scheduled_at}', completed={self.completed})>"
        )
