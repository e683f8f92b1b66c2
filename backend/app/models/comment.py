"""
ScanPlant Backend — Comment SQLAlchemy Model
==============================================

What:  ORM model for the `comments` table: short texts attached to a plant.
How:   plant_id cascades on delete (a plant's thread goes with it); plant_id
       and user_id are written once at creation.
"""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Uuid
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime, utcnow

COMMENT_MAX_LENGTH = 500


class Comment(Base):
    """A comment on a plant, owned by its author."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    text: Mapped[str] = mapped_column(String(COMMENT_MAX_LENGTH), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    plant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("plants.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_comments_plant_id", "plant_id"),
        Index("idx_comments_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, plant_id={self.plant_id}, user_id='{self.user_id}')>"
