"""
ScanPlant Backend — Comment Request/Response Schemas
======================================================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.comment import COMMENT_MAX_LENGTH


class CommentCreate(BaseModel):
    text: str = Field(min_length=1, max_length=COMMENT_MAX_LENGTH)
    plant_id: uuid.UUID


class CommentUpdate(BaseModel):
    text: str = Field(min_length=1, max_length=COMMENT_MAX_LENGTH)


class CommentResponse(BaseModel):
    id: uuid.UUID
    text: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    plant_id: uuid.UUID
    plant_scientific_name: str = ""
    user_id: str
    user_name: str = ""
