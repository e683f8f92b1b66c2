"""
ScanPlant Backend — Notification Request/Response Schemas
===========================================================

What:  Pydantic models for the notification API contract.
How:   `status` in NotificationResponse is read from the model's derived
       property (Pending / Sent / Read), never from a stored column.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class NotificationUpdate(BaseModel):
    """Full replacement of a notification's content (PUT). Status is untouched."""
    title: str = Field(min_length=1, max_length=120)
    message: str = Field(min_length=1, max_length=1000)
    type: str = Field(default="info", max_length=60, description="e.g. info, alert, watering_due")
    link_url: Optional[str] = Field(default=None, max_length=300)
    plant_id: Optional[uuid.UUID] = None


class NotificationCreate(NotificationUpdate):
    """
    What:  Payload for POST /api/notifications.

    target_user_id is honoured only for admin callers; everyone else always
    notifies themselves.
    """
    target_user_id: Optional[str] = Field(default=None, max_length=64)


class MarkReadRequest(BaseModel):
    read: bool = True


class MarkAllReadResponse(BaseModel):
    updated: int = Field(description="Number of notifications that were unread and are now read")


class NotificationResponse(BaseModel):
    id: uuid.UUID
    title: str
    message: str
    type: str
    status: str = Field(description="Pending, Sent or Read")
    created_at: datetime
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    user_id: str
    user_name: Optional[str] = None
    plant_id: Optional[uuid.UUID] = None
    plant_scientific_name: Optional[str] = None
    plant_common_name: Optional[str] = None
    link_url: Optional[str] = None
