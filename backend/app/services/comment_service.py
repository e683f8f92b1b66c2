"""
ScanPlant Backend — Comment Service
=====================================

What:  Comment threads attached to plants.
How:   Rows are read with outer joins onto users and plants so responses carry
       the author's name and the plant's scientific name without lazy loads.
Who:   Called by the /api/comments routes.

Permissions:
    Anyone may read a plant's thread. Editing and deleting require the
    author or an admin; both return the collapsed None/False signal
    otherwise. A comment's plant and author never change after creation.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import utcnow
from app.exceptions import ValidationError
from app.models.comment import Comment
from app.models.plant import Plant
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from app.services.ownership import Caller

logger = logging.getLogger(__name__)


def _joined():
    return (
        select(Comment, User.username, Plant.scientific_name)
        .outerjoin(User, User.id == Comment.user_id)
        .outerjoin(Plant, Plant.id == Comment.plant_id)
    )


def _to_response(comment: Comment, user_name: Optional[str], plant_name: Optional[str]) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        text=comment.text,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        plant_id=comment.plant_id,
        plant_scientific_name=plant_name or "",
        user_id=comment.user_id,
        user_name=user_name or "",
    )


class CommentService:
    """Business logic for plant comments."""

    async def _fetch(self, db: AsyncSession, stmt) -> List[CommentResponse]:
        result = await db.execute(stmt)
        return [_to_response(c, u, p) for c, u, p in result.all()]

    async def list_for_plant(self, db: AsyncSession, plant_id: uuid.UUID) -> List[CommentResponse]:
        return await self._fetch(
            db,
            _joined().where(Comment.plant_id == plant_id).order_by(Comment.created_at.desc()),
        )

    async def list_by_author(self, db: AsyncSession, user_id: str) -> List[CommentResponse]:
        return await self._fetch(
            db,
            _joined().where(Comment.user_id == user_id).order_by(Comment.created_at.desc()),
        )

    async def get_comment(self, db: AsyncSession, comment_id: uuid.UUID) -> Optional[CommentResponse]:
        rows = await self._fetch(db, _joined().where(Comment.id == comment_id))
        return rows[0] if rows else None

    async def create_comment(self, db: AsyncSession, caller: Caller, data: CommentCreate) -> CommentResponse:
        """
        Raises:
            ValidationError: the referenced plant does not exist
        """
        plant = await db.get(Plant, data.plant_id)
        if plant is None:
            raise ValidationError(
                message="Plant not found for this comment.",
                field="plant_id",
                context={"plant_id": str(data.plant_id)},
            )

        comment = Comment(text=data.text, plant_id=data.plant_id, user_id=caller.user_id)
        db.add(comment)
        await db.flush()
        logger.info("Comment %s added to plant %s by %s", comment.id, data.plant_id, caller.user_id)
        return await self.get_comment(db, comment.id)

    async def update_comment(
        self, db: AsyncSession, caller: Caller, comment_id: uuid.UUID, data: CommentUpdate
    ) -> Optional[CommentResponse]:
        comment = await db.get(Comment, comment_id)
        if comment is None or not caller.can_access(comment.user_id):
            logger.debug("Update of comment %s by %s: not found or not permitted", comment_id, caller.user_id)
            return None

        comment.text = data.text
        comment.updated_at = utcnow()
        await db.flush()
        logger.info("Comment %s updated by %s", comment_id, caller.user_id)
        return await self.get_comment(db, comment_id)

    async def delete_comment(self, db: AsyncSession, caller: Caller, comment_id: uuid.UUID) -> bool:
        comment = await db.get(Comment, comment_id)
        if comment is None or not caller.can_access(comment.user_id):
            logger.debug("Delete of comment %s by %s: not found or not permitted", comment_id, caller.user_id)
            return False

        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s deleted by %s", comment_id, caller.user_id)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
comment_service = CommentService()
