"""
ScanPlant Backend — Plant Catalog Service
===========================================

What:  Create, read, update, delete, name search and proximity search over
       plant records.
How:   Composes the blob store (photos), the ownership guard and the geo
       distance helper with plain SQLAlchemy queries. Changes are flushed;
       get_db_session commits once per request.
Who:   Called by the /api/plants routes. ReminderService and
       NotificationService use plant_exists_for_owner.

Write Flow (create / update with a new photo):
    ┌────────────┐    ┌──────────────┐    ┌─────────────┐    ┌────────────┐
    │ Validate   │───▶│ Blob store   │───▶│ Plant row   │───▶│ Old photo  │
    │ sci. name  │    │ store()      │    │ flush       │    │ delete()   │
    └────────────┘    └──────────────┘    └─────────────┘    │ (update)   │
                                                            └────────────┘

    A blank scientific name is rejected before anything reaches the store.
    On update the new photo is stored and referenced before the old one is
    deleted, so a plant always points at an existing object.

Not-found vs. not-yours:
    update_plant returns None and delete_plant returns False for both.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import DatabaseError, ValidationError
from app.models.comment import Comment
from app.models.notification import Notification
from app.models.plant import Plant
from app.models.reminder import Reminder
from app.schemas.plant import PlantData, PlantResponse
from app.services.geo import distance_km
from app.services.ownership import Caller
from app.services.storage_service import StorageService, storage_service

logger = logging.getLogger(__name__)


def _require_scientific_name(data: PlantData) -> str:
    name = (data.scientific_name or "").strip()
    if not name:
        raise ValidationError(
            message="Scientific name is required.",
            field="scientific_name",
        )
    return name


def _apply(plant: Plant, data: PlantData, scientific_name: str) -> None:
    """Copy editable fields onto the row. id, user_id and created_at are never touched."""
    for field, value in data.model_dump().items():
        setattr(plant, field, value)
    plant.scientific_name = scientific_name


class PlantService:
    """
    Business logic for the plant catalog.

    Reads are public: any caller may list, search and fetch plants.
    Writes go through the ownership guard (owner or admin).
    """

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or storage_service

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_plants(self, db: AsyncSession) -> List[PlantResponse]:
        result = await db.execute(select(Plant).order_by(Plant.created_at.desc()))
        return [PlantResponse.model_validate(p) for p in result.scalars().all()]

    async def list_by_owner(self, db: AsyncSession, user_id: str) -> List[PlantResponse]:
        result = await db.execute(
            select(Plant)
            .where(Plant.user_id == user_id)
            .order_by(Plant.created_at.desc())
        )
        return [PlantResponse.model_validate(p) for p in result.scalars().all()]

    async def list_near(
        self,
        db: AsyncSession,
        latitude: float,
        longitude: float,
        radius_km: Optional[float] = None,
    ) -> List[PlantResponse]:
        """
        Plants whose great-circle distance from the query point is <= radius_km.

        Linear scan over every plant; there is no spatial index. Results keep
        the catalog order (newest first).
        """
        if radius_km is None:
            radius_km = settings.default_search_radius_km
        if radius_km < 0:
            raise ValidationError(
                message="Search radius must not be negative.",
                field="radius_km",
                context={"radius_km": radius_km},
            )

        result = await db.execute(select(Plant).order_by(Plant.created_at.desc()))
        nearby = [
            p for p in result.scalars().all()
            if distance_km(latitude, longitude, p.latitude, p.longitude) <= radius_km
        ]
        logger.debug(
            "Proximity search (%.5f, %.5f) r=%.2fkm matched %d plants",
            latitude, longitude, radius_km, len(nearby),
        )
        return [PlantResponse.model_validate(p) for p in nearby]

    async def get_plant(self, db: AsyncSession, plant_id: uuid.UUID) -> Optional[PlantResponse]:
        plant = await db.get(Plant, plant_id)
        if plant is None:
            return None
        return PlantResponse.model_validate(plant)

    async def plant_exists_for_owner(
        self, db: AsyncSession, plant_id: uuid.UUID, user_id: str
    ) -> bool:
        result = await db.execute(
            select(Plant.id).where(Plant.id == plant_id, Plant.user_id == user_id)
        )
        return result.scalar_one_or_none() is not None

    async def search_by_name(self, db: AsyncSession, term: Optional[str]) -> List[PlantResponse]:
        """Case-insensitive substring match on scientific or common name; blank lists everything."""
        if term is None or not term.strip():
            return await self.list_plants(db)

        needle = term.strip().lower()
        result = await db.execute(
            select(Plant)
            .where(
                or_(
                    func.lower(Plant.scientific_name).contains(needle, autoescape=True),
                    func.lower(Plant.common_name).contains(needle, autoescape=True),
                )
            )
            .order_by(Plant.created_at.desc())
        )
        return [PlantResponse.model_validate(p) for p in result.scalars().all()]

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_plant(
        self,
        db: AsyncSession,
        caller: Caller,
        data: PlantData,
        image_name: Optional[str],
        image_content: Optional[bytes],
    ) -> PlantResponse:
        """
        Register a new plant owned by the caller.

        Raises:
            ValidationError: blank scientific name, missing or invalid image
            FileStorageError: the photo could not be written
            DatabaseError: the row could not be saved
        """
        scientific_name = _require_scientific_name(data)
        if not image_content:
            raise ValidationError(message="A plant photo is required.", field="image")

        reference = await self.storage.store(image_content, image_name)

        plant = Plant(image_url=reference, user_id=caller.user_id)
        _apply(plant, data, scientific_name)
        db.add(plant)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to save plant for user %s: %s", caller.user_id, str(e))
            await self.storage.delete(self.storage.name_from_reference(reference))
            raise DatabaseError(
                message="Failed to save plant. Please try again.",
                context={"error": str(e)},
            )

        logger.info("Plant %s created by %s (%s)", plant.id, caller.user_id, scientific_name)
        return PlantResponse.model_validate(plant)

    async def update_plant(
        self,
        db: AsyncSession,
        caller: Caller,
        plant_id: uuid.UUID,
        data: PlantData,
        image_name: Optional[str] = None,
        image_content: Optional[bytes] = None,
    ) -> Optional[PlantResponse]:
        """
        Replace the editable fields of a plant, optionally swapping its photo.

        Returns None when the plant does not exist or the caller is neither
        its owner nor an admin.
        """
        plant = await db.get(Plant, plant_id)
        if plant is None or not caller.can_access(plant.user_id):
            logger.debug("Update of plant %s by %s: not found or not permitted", plant_id, caller.user_id)
            return None

        scientific_name = _require_scientific_name(data)

        old_reference: Optional[str] = None
        new_reference: Optional[str] = None
        if image_content:
            new_reference = await self.storage.store(image_content, image_name)
            old_reference = plant.image_url
            plant.image_url = new_reference

        _apply(plant, data, scientific_name)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update plant %s for user %s: %s", plant_id, caller.user_id, str(e))
            if new_reference:
                await self.storage.delete(self.storage.name_from_reference(new_reference))
            raise DatabaseError(
                message="Failed to update plant. Please try again.",
                context={"error": str(e)},
            )

        # The old photo goes before get_db_session commits: a failed commit
        # leaves the row pointing at a deleted object.
        if old_reference:
            await self.storage.delete(self.storage.name_from_reference(old_reference))

        logger.info("Plant %s updated by %s", plant.id, caller.user_id)
        return PlantResponse.model_validate(plant)

    async def delete_plant(self, db: AsyncSession, caller: Caller, plant_id: uuid.UUID) -> bool:
        """
        Delete a plant together with its photo and comments.

        Reminders and notifications that referenced the plant survive with
        plant_id cleared.
        """
        plant = await db.get(Plant, plant_id)
        if plant is None or not caller.can_access(plant.user_id):
            logger.debug("Delete of plant %s by %s: not found or not permitted", plant_id, caller.user_id)
            return False

        await self.storage.delete(self.storage.name_from_reference(plant.image_url))

        await db.execute(delete(Comment).where(Comment.plant_id == plant_id))
        await db.execute(
            update(Reminder).where(Reminder.plant_id == plant_id).values(plant_id=None)
        )
        await db.execute(
            update(Notification).where(Notification.plant_id == plant_id).values(plant_id=None)
        )
        await db.delete(plant)
        await db.flush()

        logger.info("Plant %s deleted by %s", plant_id, caller.user_id)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
plant_service = PlantService()
