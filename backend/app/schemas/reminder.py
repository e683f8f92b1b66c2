"""
ScanPlant Backend — Reminder Request/Response Schemas
=======================================================

What:  Pydantic models for the reminder API contract.

Derived fields:
    ReminderResponse carries three values that are never stored:
        overdue         = not completed AND scheduled_at < now
        days_remaining  = scheduled date − today, in whole UTC calendar days
                          (negative once the date has passed)
        priority_label  = Low / Medium / High
    They are filled in by `build_reminder_response` with the clock reading
    taken by the service for that call.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.reminder import PRIORITY_LABELS, PRIORITY_MEDIUM, Reminder


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ReminderCreate(BaseModel):
    """
    What:  Payload for POST /api/reminders.

    scheduled_at without an offset is interpreted as UTC.
    plant_id, when present, must reference one of the caller's plants.
    """
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    scheduled_at: datetime = Field(description="When the reminder is due (ISO 8601)")
    priority: int = Field(default=PRIORITY_MEDIUM, ge=1, le=3, description="1 Low, 2 Medium, 3 High")
    category: str = Field(default="", max_length=50)
    plant_id: Optional[uuid.UUID] = None


class ReminderUpdate(ReminderCreate):
    """Full replacement of a reminder's mutable fields (PUT)."""
    completed: bool = False


class ReminderComplete(BaseModel):
    completed: bool = True


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReminderResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    scheduled_at: datetime
    completed: bool
    priority: int
    priority_label: str
    category: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    user_id: str
    user_name: str = ""
    plant_id: Optional[uuid.UUID] = None
    plant_scientific_name: Optional[str] = None
    plant_common_name: Optional[str] = None
    overdue: bool = Field(description="Not completed and scheduled time already passed")
    days_remaining: int = Field(description="Calendar days until the scheduled date (UTC); negative when past")


class ReminderStatistics(BaseModel):
    """
    What:  Per-user snapshot returned by GET /api/reminders/statistics.

    Invariants:
        total == completed + pending
        completion_percentage == round(completed / total * 100, 2), or 0 when total is 0
    """
    total: int
    completed: int
    pending: int
    overdue: int
    due_today: int
    high_priority_pending: int
    completion_percentage: float


def build_reminder_response(
    reminder: Reminder,
    now: datetime,
    user_name: Optional[str] = None,
    plant_scientific_name: Optional[str] = None,
    plant_common_name: Optional[str] = None,
) -> ReminderResponse:
    """Project a Reminder row into its response, computing the derived fields against `now`."""
    return ReminderResponse(
        id=reminder.id,
        title=reminder.title,
        description=reminder.description,
        scheduled_at=reminder.scheduled_at,
        completed=reminder.completed,
        priority=reminder.priority,
        priority_label=PRIORITY_LABELS.get(reminder.priority, "Unknown"),
        category=reminder.category,
        created_at=reminder.created_at,
        updated_at=reminder.updated_at,
        user_id=reminder.user_id,
        user_name=user_name or "",
        plant_id=reminder.plant_id,
        plant_scientific_name=plant_scientific_name,
        plant_common_name=plant_common_name,
        overdue=not reminder.completed and reminder.scheduled_at < now,
        days_remaining=(reminder.scheduled_at.date() - now.date()).days,
    )
