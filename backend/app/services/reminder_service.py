"""
ScanPlant Backend — Reminder Service
======================================

What:  Personal care reminders (watering, pruning, repotting...) with filtered
       views, free-text search and per-user statistics.
How:   Every query is scoped to `Reminder.user_id == caller.user_id`. There is
       no admin override here: a reminder belongs to exactly one user, and any
       other caller sees None / an empty list / False.
Who:   Called by the /api/reminders routes.

Time windows (all UTC, `now` read once per call):
    overdue       not completed AND scheduled_at < now
    today         start_of_day <= scheduled_at <  start_of_day + 1 day
    next 7 days   start_of_day <= scheduled_at <= start_of_day + 7 days

Ordering:
    scheduled_at ascending, except list_completed which shows the most
    recently touched first (updated_at, falling back to created_at).

Plant reference:
    Optional. When given on create or update it must point at one of the
    caller's own plants, otherwise ValidationError.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import ensure_utc, utcnow
from app.exceptions import ValidationError
from app.models.plant import Plant
from app.models.reminder import PRIORITY_HIGH, PRIORITY_LABELS, Reminder
from app.models.user import User
from app.schemas.reminder import (
    ReminderCreate,
    ReminderResponse,
    ReminderStatistics,
    ReminderUpdate,
    build_reminder_response,
)
from app.services.ownership import Caller
from app.services.plant_service import PlantService, plant_service

logger = logging.getLogger(__name__)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


class ReminderService:
    """Business logic for user-owned reminders."""

    def __init__(self, plants: Optional[PlantService] = None):
        self.plants = plants or plant_service

    # ── Query helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _owned(caller: Caller):
        return (
            select(Reminder, User.username, Plant.scientific_name, Plant.common_name)
            .outerjoin(User, User.id == Reminder.user_id)
            .outerjoin(Plant, Plant.id == Reminder.plant_id)
            .where(Reminder.user_id == caller.user_id)
        )

    async def _fetch(self, db: AsyncSession, stmt, now: Optional[datetime] = None) -> List[ReminderResponse]:
        now = now or utcnow()
        result = await db.execute(stmt)
        return [
            build_reminder_response(r, now, user_name, sci_name, common_name)
            for r, user_name, sci_name, common_name in result.all()
        ]

    async def _list(self, db: AsyncSession, caller: Caller, *criteria) -> List[ReminderResponse]:
        stmt = self._owned(caller).where(*criteria).order_by(Reminder.scheduled_at.asc())
        return await self._fetch(db, stmt)

    async def _owned_row(self, db: AsyncSession, caller: Caller, reminder_id: uuid.UUID) -> Optional[Reminder]:
        reminder = await db.get(Reminder, reminder_id)
        if reminder is None or reminder.user_id != caller.user_id:
            logger.debug("Reminder %s not found for %s", reminder_id, caller.user_id)
            return None
        return reminder

    async def _check_plant(self, db: AsyncSession, caller: Caller, plant_id: Optional[uuid.UUID]) -> None:
        if plant_id is None:
            return
        if not await self.plants.plant_exists_for_owner(db, plant_id, caller.user_id):
            raise ValidationError(
                message="Reminder's plant reference is invalid: plant not found or not owned by you.",
                field="plant_id",
                context={"plant_id": str(plant_id)},
            )

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_reminders(self, db: AsyncSession, caller: Caller) -> List[ReminderResponse]:
        return await self._list(db, caller)

    async def get_reminder(
        self, db: AsyncSession, caller: Caller, reminder_id: uuid.UUID
    ) -> Optional[ReminderResponse]:
        rows = await self._fetch(db, self._owned(caller).where(Reminder.id == reminder_id))
        return rows[0] if rows else None

    async def list_by_category(self, db: AsyncSession, caller: Caller, category: str) -> List[ReminderResponse]:
        needle = (category or "").strip().lower()
        return await self._list(db, caller, func.lower(Reminder.category).contains(needle, autoescape=True))

    async def list_by_priority(self, db: AsyncSession, caller: Caller, priority: int) -> List[ReminderResponse]:
        if priority not in PRIORITY_LABELS:
            raise ValidationError(
                message="Priority must be 1 (Low), 2 (Medium) or 3 (High).",
                field="priority",
                context={"priority": priority},
            )
        return await self._list(db, caller, Reminder.priority == priority)

    async def list_pending(self, db: AsyncSession, caller: Caller) -> List[ReminderResponse]:
        return await self._list(db, caller, Reminder.completed.is_(False))

    async def list_completed(self, db: AsyncSession, caller: Caller) -> List[ReminderResponse]:
        stmt = (
            self._owned(caller)
            .where(Reminder.completed.is_(True))
            .order_by(func.coalesce(Reminder.updated_at, Reminder.created_at).desc())
        )
        return await self._fetch(db, stmt)

    async def list_overdue(self, db: AsyncSession, caller: Caller) -> List[ReminderResponse]:
        now = utcnow()
        stmt = (
            self._owned(caller)
            .where(Reminder.completed.is_(False), Reminder.scheduled_at < now)
            .order_by(Reminder.scheduled_at.asc())
        )
        return await self._fetch(db, stmt, now)

    async def list_today(self, db: AsyncSession, caller: Caller) -> List[ReminderResponse]:
        today = start_of_day(utcnow())
        return await self._list(
            db, caller,
            Reminder.scheduled_at >= today,
            Reminder.scheduled_at < today + timedelta(days=1),
        )

    async def list_next_7_days(self, db: AsyncSession, caller: Caller) -> List[ReminderResponse]:
        today = start_of_day(utcnow())
        return await self._list(
            db, caller,
            Reminder.scheduled_at >= today,
            Reminder.scheduled_at <= today + timedelta(days=7),
        )

    async def list_by_plant(self, db: AsyncSession, caller: Caller, plant_id: uuid.UUID) -> List[ReminderResponse]:
        return await self._list(db, caller, Reminder.plant_id == plant_id)

    async def search(self, db: AsyncSession, caller: Caller, term: Optional[str]) -> List[ReminderResponse]:
        """Case-insensitive substring search over title, description and category."""
        if term is None or not term.strip():
            raise ValidationError(message="Search term must not be empty.", field="term")

        needle = term.strip().lower()
        return await self._list(
            db, caller,
            or_(
                func.lower(Reminder.title).contains(needle, autoescape=True),
                func.lower(Reminder.description).contains(needle, autoescape=True),
                func.lower(Reminder.category).contains(needle, autoescape=True),
            ),
        )

    async def compute_statistics(self, db: AsyncSession, caller: Caller) -> ReminderStatistics:
        """
        Counts over all of the caller's reminders.

        due_today counts everything scheduled today whether or not it is done.
        """
        now = utcnow()
        today = start_of_day(now)
        tomorrow = today + timedelta(days=1)

        result = await db.execute(select(Reminder).where(Reminder.user_id == caller.user_id))
        reminders = result.scalars().all()

        total = len(reminders)
        completed = sum(1 for r in reminders if r.completed)
        overdue = sum(1 for r in reminders if not r.completed and r.scheduled_at < now)
        due_today = sum(1 for r in reminders if today <= r.scheduled_at < tomorrow)
        high_priority_pending = sum(
            1 for r in reminders if not r.completed and r.priority == PRIORITY_HIGH
        )

        return ReminderStatistics(
            total=total,
            completed=completed,
            pending=total - completed,
            overdue=overdue,
            due_today=due_today,
            high_priority_pending=high_priority_pending,
            completion_percentage=round(completed / total * 100, 2) if total else 0.0,
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_reminder(self, db: AsyncSession, caller: Caller, data: ReminderCreate) -> ReminderResponse:
        """
        Raises:
            ValidationError: plant_id given but not one of the caller's plants
        """
        await self._check_plant(db, caller, data.plant_id)

        reminder = Reminder(
            title=data.title,
            description=data.description,
            scheduled_at=ensure_utc(data.scheduled_at),
            completed=False,
            priority=data.priority,
            category=data.category,
            plant_id=data.plant_id,
            user_id=caller.user_id,
        )
        db.add(reminder)
        await db.flush()
        logger.info("Reminder %s created by %s for %s", reminder.id, caller.user_id, reminder.scheduled_at)
        return await self.get_reminder(db, caller, reminder.id)

    async def update_reminder(
        self, db: AsyncSession, caller: Caller, reminder_id: uuid.UUID, data: ReminderUpdate
    ) -> Optional[ReminderResponse]:
        reminder = await self._owned_row(db, caller, reminder_id)
        if reminder is None:
            return None
        await self._check_plant(db, caller, data.plant_id)

        reminder.title = data.title
        reminder.description = data.description
        reminder.scheduled_at = ensure_utc(data.scheduled_at)
        reminder.priority = data.priority
        reminder.category = data.category
        reminder.completed = data.completed
        reminder.plant_id = data.plant_id
        reminder.updated_at = utcnow()
        await db.flush()
        logger.info("Reminder %s updated by %s", reminder_id, caller.user_id)
        return await self.get_reminder(db, caller, reminder_id)

    async def mark_complete(
        self, db: AsyncSession, caller: Caller, reminder_id: uuid.UUID, completed: bool = True
    ) -> Optional[ReminderResponse]:
        reminder = await self._owned_row(db, caller, reminder_id)
        if reminder is None:
            return None

        reminder.completed = completed
        reminder.updated_at = utcnow()
        await db.flush()
        logger.info("Reminder %s marked completed=%s by %s", reminder_id, completed, caller.user_id)
        return await self.get_reminder(db, caller, reminder_id)

    async def delete_reminder(self, db: AsyncSession, caller: Caller, reminder_id: uuid.UUID) -> bool:
        reminder = await self._owned_row(db, caller, reminder_id)
        if reminder is None:
            return False

        await db.delete(reminder)
        await db.flush()
        logger.info("Reminder %s deleted by %s", reminder_id, caller.user_id)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
reminder_service = ReminderService()
