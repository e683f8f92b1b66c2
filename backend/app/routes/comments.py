"""
ScanPlant Backend — Comment Route Handlers
============================================

What:  /api/comments endpoints. Threads are public to read; writing needs a
       caller, and edits/deletes are limited to the author or an admin.
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_caller
from app.exceptions import NotFoundError
from app.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from app.schemas.common import ErrorResponse
from app.services.comment_service import comment_service
from app.services.ownership import Caller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/comments", tags=["Comments"])

_not_found = {404: {"description": "Comment not found", "model": ErrorResponse}}


@router.get("/plant/{plant_id}", response_model=List[CommentResponse], summary="Comments on a plant")
async def list_plant_comments(
    plant_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)
) -> List[CommentResponse]:
    return await comment_service.list_for_plant(db, plant_id)


@router.get("/mine", response_model=List[CommentResponse], summary="Comments written by the caller")
async def list_my_comments(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return await comment_service.list_by_author(db, caller.user_id)


@router.get("/{comment_id}", response_model=CommentResponse, responses=_not_found)
async def get_comment(comment_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)) -> CommentResponse:
    comment = await comment_service.get_comment(db, comment_id)
    if comment is None:
        raise NotFoundError(resource="comment", resource_id=str(comment_id))
    return comment


@router.post(
    "",
    status_code=201,
    response_model=CommentResponse,
    responses={400: {"description": "Plant does not exist", "model": ErrorResponse}},
)
async def create_comment(
    payload: CommentCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(db, caller, payload)


@router.put("/{comment_id}", response_model=CommentResponse, responses=_not_found)
async def update_comment(
    comment_id: uuid.UUID,
    payload: CommentUpdate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    comment = await comment_service.update_comment(db, caller, comment_id, payload)
    if comment is None:
        raise NotFoundError(resource="comment", resource_id=str(comment_id))
    return comment


@router.delete("/{comment_id}", status_code=204, responses=_not_found)
async def delete_comment(
    comment_id: uuid.UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    if not await comment_service.delete_comment(db, caller, comment_id):
        raise NotFoundError(resource="comment", resource_id=str(comment_id))
    return Response(status_code=204)
