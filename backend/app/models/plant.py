"""
ScanPlant Backend — Plant SQLAlchemy Model
============================================

What:  ORM model representing the `plants` table: a user-submitted plant
       sighting with its photo reference and geolocation.
Who:   Used by PlantService for CRUD, search and proximity queries, and by
       Alembic for schema management.

Table Design:
    - UUID primary key, non-sequential so ids cannot be enumerated
    - image_url: the reference returned by the blob store, stored verbatim
    - latitude/longitude: WGS-84 degrees, plain floats (proximity search is a
      linear scan with the haversine formula, no spatial index)
    - created_at and user_id are written once and never updated
    - comments cascade on delete; reminders and notifications keep their row
      with plant_id set to NULL
"""

import uuid
from datetime import datetime

from sqlalchemy import Float, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime, utcnow


class Plant(Base):
    """
    A plant sighting registered by a user.

    Query Patterns:
        - Catalog / owner listing: ORDER BY created_at DESC
          → idx_plants_created_at, idx_plants_user_id
        - Name search: LOWER(scientific_name|common_name) LIKE '%term%'
        - Proximity: full scan + haversine in Python
    """

    __tablename__ = "plants"

    # ── Primary Key ───────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Image ─────────────────────────────────────────────────────────────
    # Opaque blob store reference, e.g. https://host/files/<uuid>.jpg
    image_url: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        comment="Blob store reference of the plant photo",
    )

    # ── Identification ────────────────────────────────────────────────────
    scientific_name: Mapped[str] = mapped_column(String(255), nullable=False)
    common_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    family: Mapped[str | None] = mapped_column(String(255), nullable=True)
    genus: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # ── Descriptive free text ─────────────────────────────────────────────
    wiki_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    wiki_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    care_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    enhanced_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Location ──────────────────────────────────────────────────────────
    latitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    longitude: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    location_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # ── Timestamps & ownership (immutable) ────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this plant was registered (UTC)",
    )

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner; taken from the caller, never from the payload",
    )

    __table_args__ = (
        Index("idx_plants_created_at", "created_at"),
        Index("idx_plants_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Plant(id={self.id}, scientific_name='{self.scientific_name}', "
            f"user_id='{self.user_id}')>"
        )
