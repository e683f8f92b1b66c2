"""
ScanPlant Backend — User SQLAlchemy Model
===========================================

What:  Local record of a caller known to this service.
How:   Rows are provisioned from the caller identity forwarded by the
       authentication gateway (see UserService.ensure_user). Credentials,
       tokens and password resets live in the identity provider, not here.
Who:   Referenced by every owned record; queried for usernames in responses
       and to validate an admin's notification target.
"""

from datetime import datetime

from sqlalchemy import String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime, utcnow


class User(Base):
    """A caller, keyed by the identity provider's opaque user id."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Opaque user id issued by the identity provider",
    )

    username: Mapped[str | None] = mapped_column(
        String(256),
        nullable=True,
        comment="Display name forwarded by the gateway",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="First time this caller was seen (UTC)",
    )

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', username='{self.username}')>"
