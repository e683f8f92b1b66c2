"""
ScanPlant Backend — Notification Route Handlers
=================================================

What:  /api/notifications endpoints: inbox listing with filters, create and
       dispatch, edit, read/unread toggling, mark-all-read and delete.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_caller
from app.exceptions import NotFoundError
from app.schemas.common import ErrorResponse
from app.schemas.notification import (
    MarkAllReadResponse,
    MarkReadRequest,
    NotificationCreate,
    NotificationResponse,
    NotificationUpdate,
)
from app.services.notification_service import notification_service
from app.services.ownership import Caller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])

_not_found = {404: {"description": "Notification not found", "model": ErrorResponse}}


@router.get("", response_model=List[NotificationResponse], summary="The caller's notifications, newest first")
async def list_notifications(
    unread: Optional[bool] = Query(default=None, description="true: unread only, false: read only"),
    type: Optional[str] = Query(default=None, description="Notification type (case-insensitive)"),
    start_date: Optional[datetime] = Query(default=None, description="Created on or after (ISO 8601)"),
    end_date: Optional[datetime] = Query(default=None, description="Created on or before (ISO 8601)"),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> List[NotificationResponse]:
    return await notification_service.list_notifications(
        db, caller, unread=unread, type_=type, start_date=start_date, end_date=end_date
    )


@router.get("/unread", response_model=List[NotificationResponse])
async def list_unread(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[NotificationResponse]:
    return await notification_service.list_notifications(db, caller, unread=True)


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> MarkAllReadResponse:
    updated = await notification_service.mark_all_read(db, caller)
    return MarkAllReadResponse(updated=updated)


@router.get("/{notification_id}", response_model=NotificationResponse, responses=_not_found)
async def get_notification(
    notification_id: uuid.UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    notification = await notification_service.get_notification(db, caller, notification_id)
    if notification is None:
        raise NotFoundError(resource="notification", resource_id=str(notification_id))
    return notification


@router.post(
    "",
    status_code=201,
    response_model=NotificationResponse,
    responses={
        400: {"description": "Unknown target or invalid plant reference", "model": ErrorResponse},
        502: {"description": "Dispatch failed", "model": ErrorResponse},
    },
)
async def create_notification(
    payload: NotificationCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    return await notification_service.create_notification(db, caller, payload)


@router.put("/{notification_id}", response_model=NotificationResponse, responses=_not_found)
async def update_notification(
    notification_id: uuid.UUID,
    payload: NotificationUpdate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    notification = await notification_service.update_notification(db, caller, notification_id, payload)
    if notification is None:
        raise NotFoundError(resource="notification", resource_id=str(notification_id))
    return notification


@router.patch("/{notification_id}/read", response_model=NotificationResponse, responses=_not_found)
async def mark_read(
    notification_id: uuid.UUID,
    payload: MarkReadRequest = MarkReadRequest(),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    notification = await notification_service.mark_read(db, caller, notification_id, payload.read)
    if notification is None:
        raise NotFoundError(resource="notification", resource_id=str(notification_id))
    return notification


@router.delete("/{notification_id}", status_code=204, responses=_not_found)
async def delete_notification(
    notification_id: uuid.UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    if not await notification_service.delete_notification(db, caller, notification_id):
        raise NotFoundError(resource="notification", resource_id=str(notification_id))
    return Response(status_code=204)
