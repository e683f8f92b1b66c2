"""
ScanPlant Backend — Notification Service
==========================================

What:  Per-user notification inbox: create and dispatch, filter, edit,
       mark read, delete.
How:   Status is never stored. It follows from the timestamps:
           read_at set          → Read
           sent_at set          → Sent
           neither              → Pending
       Creation persists the row as Pending, hands it to the
       NotificationSender, and stamps sent_at only after dispatch returns.
Who:   Called by the /api/notifications routes.

Dispatch Flow (create_notification):
    ┌────────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Resolve    │───▶│ Insert row   │───▶│ sender.      │───▶│ sent_at  │
    │ recipient  │    │ (Pending)    │    │ dispatch()   │    │ = now    │
    └────────────┘    └──────────────┘    └──────────────┘    └──────────┘

    A sender failure propagates untouched; the request fails and
    get_db_session rolls the Pending row back. Nothing is retried.

Permissions:
    Reading and marking read are for the recipient only. Editing and
    deleting are allowed to the recipient or an admin. An admin may address
    another user through target_user_id; for everyone else the field is
    ignored and the caller is the recipient.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import ensure_utc, utcnow
from app.exceptions import ValidationError
from app.models.notification import Notification
from app.models.plant import Plant
from app.models.user import User
from app.schemas.notification import (
    NotificationCreate,
    NotificationResponse,
    NotificationUpdate,
)
from app.services.notification_sender import NotificationSender, notification_sender
from app.services.ownership import Caller
from app.services.plant_service import PlantService, plant_service
from app.services.user_service import UserService, user_service

logger = logging.getLogger(__name__)


def _joined():
    return (
        select(Notification, User.username, Plant.scientific_name, Plant.common_name)
        .outerjoin(User, User.id == Notification.user_id)
        .outerjoin(Plant, Plant.id == Notification.plant_id)
    )


def _to_response(
    notification: Notification,
    user_name: Optional[str],
    plant_scientific_name: Optional[str],
    plant_common_name: Optional[str],
) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        status=notification.status,
        created_at=notification.created_at,
        sent_at=notification.sent_at,
        read_at=notification.read_at,
        user_id=notification.user_id,
        user_name=user_name,
        plant_id=notification.plant_id,
        plant_scientific_name=plant_scientific_name,
        plant_common_name=plant_common_name,
        link_url=notification.link_url,
    )


class NotificationService:
    """Business logic for the notification inbox."""

    def __init__(
        self,
        sender: Optional[NotificationSender] = None,
        plants: Optional[PlantService] = None,
        users: Optional[UserService] = None,
    ):
        self.sender = sender or notification_sender
        self.plants = plants or plant_service
        self.users = users or user_service

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _fetch(self, db: AsyncSession, stmt) -> List[NotificationResponse]:
        result = await db.execute(stmt)
        return [_to_response(*row) for row in result.all()]

    async def _response(self, db: AsyncSession, notification_id: uuid.UUID) -> Optional[NotificationResponse]:
        rows = await self._fetch(db, _joined().where(Notification.id == notification_id))
        return rows[0] if rows else None

    async def _check_plant(self, db: AsyncSession, plant_id: Optional[uuid.UUID], recipient_id: str) -> None:
        if plant_id is None:
            return
        if not await self.plants.plant_exists_for_owner(db, plant_id, recipient_id):
            raise ValidationError(
                message="Notification's plant reference is invalid: plant not found or not owned by the recipient.",
                field="plant_id",
                context={"plant_id": str(plant_id), "recipient": recipient_id},
            )

    async def _resolve_recipient(self, db: AsyncSession, caller: Caller, target_user_id: Optional[str]) -> str:
        if not caller.is_admin or not target_user_id:
            return caller.user_id
        if not await self.users.user_exists(db, target_user_id):
            raise ValidationError(
                message="Target user does not exist.",
                field="target_user_id",
                context={"target_user_id": target_user_id},
            )
        return target_user_id

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_notifications(
        self,
        db: AsyncSession,
        caller: Caller,
        unread: Optional[bool] = None,
        type_: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[NotificationResponse]:
        """
        The caller's notifications, newest first.

        Args:
            unread: True → only unread, False → only read, None → all
            type_: exact type match, case-insensitive
            start_date / end_date: inclusive bounds on created_at
        """
        stmt = _joined().where(Notification.user_id == caller.user_id)
        if unread is True:
            stmt = stmt.where(Notification.read_at.is_(None))
        elif unread is False:
            stmt = stmt.where(Notification.read_at.is_not(None))
        if type_:
            stmt = stmt.where(func.lower(Notification.type) == type_.strip().lower())
        if start_date is not None:
            stmt = stmt.where(Notification.created_at >= ensure_utc(start_date))
        if end_date is not None:
            stmt = stmt.where(Notification.created_at <= ensure_utc(end_date))

        return await self._fetch(db, stmt.order_by(Notification.created_at.desc()))

    async def get_notification(
        self, db: AsyncSession, caller: Caller, notification_id: uuid.UUID
    ) -> Optional[NotificationResponse]:
        rows = await self._fetch(
            db,
            _joined().where(
                Notification.id == notification_id,
                Notification.user_id == caller.user_id,
            ),
        )
        return rows[0] if rows else None

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_notification(
        self, db: AsyncSession, caller: Caller, data: NotificationCreate
    ) -> NotificationResponse:
        """
        Create a notification and dispatch it.

        Raises:
            ValidationError: unknown admin target, or plant not owned by the recipient
            NotificationDispatchError (or whatever the sender raises): dispatch failed
        """
        recipient_id = await self._resolve_recipient(db, caller, data.target_user_id)
        await self._check_plant(db, data.plant_id, recipient_id)

        notification = Notification(
            title=data.title,
            message=data.message,
            type=data.type,
            link_url=data.link_url,
            plant_id=data.plant_id,
            user_id=recipient_id,
        )
        db.add(notification)
        await db.flush()
        logger.info("Notification %s created for %s (Pending)", notification.id, recipient_id)

        await self.sender.dispatch(notification)

        notification.sent_at = utcnow()
        await db.flush()
        logger.info("Notification %s dispatched via %s", notification.id, self.sender.channel)
        return await self._response(db, notification.id)

    async def update_notification(
        self, db: AsyncSession, caller: Caller, notification_id: uuid.UUID, data: NotificationUpdate
    ) -> Optional[NotificationResponse]:
        """Replace content fields; status timestamps and recipient stay as they are."""
        notification = await db.get(Notification, notification_id)
        if notification is None or not caller.can_access(notification.user_id):
            logger.debug("Update of notification %s by %s: not found or not permitted", notification_id, caller.user_id)
            return None
        await self._check_plant(db, data.plant_id, notification.user_id)

        notification.title = data.title
        notification.message = data.message
        notification.type = data.type
        notification.link_url = data.link_url
        notification.plant_id = data.plant_id
        await db.flush()
        logger.info("Notification %s updated by %s", notification_id, caller.user_id)
        return await self._response(db, notification_id)

    async def delete_notification(self, db: AsyncSession, caller: Caller, notification_id: uuid.UUID) -> bool:
        notification = await db.get(Notification, notification_id)
        if notification is None or not caller.can_access(notification.user_id):
            logger.debug("Delete of notification %s by %s: not found or not permitted", notification_id, caller.user_id)
            return False

        await db.delete(notification)
        await db.flush()
        logger.info("Notification %s deleted by %s", notification_id, caller.user_id)
        return True

    async def mark_read(
        self, db: AsyncSession, caller: Caller, notification_id: uuid.UUID, read: bool = True
    ) -> Optional[NotificationResponse]:
        """
        Set or clear read_at. Clearing drops the status back to Sent (or
        Pending if it was never dispatched).
        """
        notification = await db.get(Notification, notification_id)
        if notification is None or notification.user_id != caller.user_id:
            return None

        notification.read_at = utcnow() if read else None
        await db.flush()
        return await self._response(db, notification_id)

    async def mark_all_read(self, db: AsyncSession, caller: Caller) -> int:
        """Mark every unread notification of the caller as read; returns how many changed."""
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == caller.user_id, Notification.read_at.is_(None))
            .values(read_at=utcnow())
            .execution_options(synchronize_session="evaluate")
        )
        logger.info("Marked %d notifications read for %s", result.rowcount, caller.user_id)
        return result.rowcount


# ── Singleton Instance ────────────────────────────────────────────────────
notification_service = NotificationService()
