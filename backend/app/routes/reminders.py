"""
ScanPlant Backend — Reminder Route Handlers
=============================================

What:  /api/reminders endpoints: CRUD, completion toggle, filtered views,
       search and statistics. Every endpoint is scoped to the caller.
How:   Fixed-path views are declared before /{reminder_id} so they are not
       captured by the UUID path parameter.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_caller
from app.exceptions import NotFoundError
from app.schemas.common import ErrorResponse
from app.schemas.reminder import (
    ReminderComplete,
    ReminderCreate,
    ReminderResponse,
    ReminderStatistics,
    ReminderUpdate,
)
from app.services.ownership import Caller
from app.services.reminder_service import reminder_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reminders", tags=["Reminders"])

_not_found = {404: {"description": "Reminder not found", "model": ErrorResponse}}


# ── Views ─────────────────────────────────────────────────────────────────


@router.get("", response_model=List[ReminderResponse], summary="All of the caller's reminders")
async def list_reminders(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_reminders(db, caller)


@router.get("/statistics", response_model=ReminderStatistics)
async def reminder_statistics(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> ReminderStatistics:
    return await reminder_service.compute_statistics(db, caller)


@router.get("/pending", response_model=List[ReminderResponse])
async def list_pending(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_pending(db, caller)


@router.get("/completed", response_model=List[ReminderResponse])
async def list_completed(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_completed(db, caller)


@router.get("/overdue", response_model=List[ReminderResponse])
async def list_overdue(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_overdue(db, caller)


@router.get("/today", response_model=List[ReminderResponse])
async def list_today(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_today(db, caller)


@router.get("/next-week", response_model=List[ReminderResponse], summary="Due from today through the next 7 days")
async def list_next_week(
    caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_next_7_days(db, caller)


@router.get("/search", response_model=List[ReminderResponse],
            responses={400: {"description": "Blank search term", "model": ErrorResponse}})
async def search_reminders(
    term: Optional[str] = Query(default=None, description="Substring of title, description or category"),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> List[ReminderResponse]:
    return await reminder_service.search(db, caller, term)


@router.get("/category/{category}", response_model=List[ReminderResponse])
async def list_by_category(
    category: str, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_by_category(db, caller, category)


@router.get("/priority/{priority}", response_model=List[ReminderResponse],
            responses={400: {"description": "Priority outside 1..3", "model": ErrorResponse}})
async def list_by_priority(
    priority: int, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_by_priority(db, caller, priority)


@router.get("/plant/{plant_id}", response_model=List[ReminderResponse])
async def list_by_plant(
    plant_id: uuid.UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> List[ReminderResponse]:
    return await reminder_service.list_by_plant(db, caller, plant_id)


@router.get("/{reminder_id}", response_model=ReminderResponse, responses=_not_found)
async def get_reminder(
    reminder_id: uuid.UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> ReminderResponse:
    reminder = await reminder_service.get_reminder(db, caller, reminder_id)
    if reminder is None:
        raise NotFoundError(resource="reminder", resource_id=str(reminder_id))
    return reminder


# ── Writes ────────────────────────────────────────────────────────────────


@router.post("", status_code=201, response_model=ReminderResponse,
             responses={400: {"description": "Invalid plant reference", "model": ErrorResponse}})
async def create_reminder(
    payload: ReminderCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> ReminderResponse:
    return await reminder_service.create_reminder(db, caller, payload)


@router.put("/{reminder_id}", response_model=ReminderResponse, responses=_not_found)
async def update_reminder(
    reminder_id: uuid.UUID,
    payload: ReminderUpdate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> ReminderResponse:
    reminder = await reminder_service.update_reminder(db, caller, reminder_id, payload)
    if reminder is None:
        raise NotFoundError(resource="reminder", resource_id=str(reminder_id))
    return reminder


@router.patch("/{reminder_id}/complete", response_model=ReminderResponse, responses=_not_found)
async def complete_reminder(
    reminder_id: uuid.UUID,
    payload: ReminderComplete = ReminderComplete(),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> ReminderResponse:
    reminder = await reminder_service.mark_complete(db, caller, reminder_id, payload.completed)
    if reminder is None:
        raise NotFoundError(resource="reminder", resource_id=str(reminder_id))
    return reminder


@router.delete("/{reminder_id}", status_code=204, responses=_not_found)
async def delete_reminder(
    reminder_id: uuid.UUID, caller: Caller = Depends(get_caller), db: AsyncSession = Depends(get_db_session)
) -> Response:
    if not await reminder_service.delete_reminder(db, caller, reminder_id):
        raise NotFoundError(resource="reminder", resource_id=str(reminder_id))
    return Response(status_code=204)
