"""
ScanPlant Backend — Notification SQLAlchemy Model
===================================================

What:  ORM model for the `notifications` table: one-way messages delivered
       to a single recipient, with a read/unread lifecycle.

Status lifecycle:
    Status is not a column. It is derived from the two timestamps:

        read_at set                → Read
        sent_at set, read_at NULL  → Sent
        neither                    → Pending

    Pending ──dispatch──▶ Sent ──mark read──▶ Read
                           ▲                    │
                           └────mark unread─────┘   (back to Pending if never sent)
"""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime, utcnow

STATUS_PENDING = "Pending"
STATUS_SENT = "Sent"
STATUS_READ = "Read"


class Notification(Base):
    """A notification addressed to one user."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(120), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(60),
        nullable=False,
        default="info",
        server_default=text("'info'"),
        comment="Free-text tag, e.g. info, alert, watering_due",
    )
    link_url: Mapped[str | None] = mapped_column(String(300), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    sent_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Recipient",
    )
    plant_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("plants.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    @property
    def status(self) -> str:
        if self.read_at is not None:
            return STATUS_READ
        if self.sent_at is not None:
            return STATUS_SENT
        return STATUS_PENDING

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id='{self.user_id}', status='{self.status}')>"
