"""
ScanPlant Backend — User Service
==================================

What:  Keeps a local `users` row for every caller the gateway forwards.
Why:   Owned records reference users.id, and admins may only target
       notifications at users this service has actually seen.
"""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import utcnow
from app.models.user import User
from app.services.ownership import Caller

logger = logging.getLogger(__name__)


def _insert_for(db: AsyncSession):
    """INSERT construct with ON CONFLICT support for the bound dialect."""
    if db.get_bind().dialect.name == "postgresql":
        return postgresql_insert
    return sqlite_insert


class UserService:
    """Provisioning and existence checks for callers."""

    async def ensure_user(self, db: AsyncSession, caller: Caller) -> User:
        """
        Return the caller's row, creating it on first sight.

        The username is refreshed whenever the gateway forwards a different one.
        """
        user = await db.get(User, caller.user_id)
        if user is None:
            # A parallel first request may insert the same id in between
            result = await db.execute(
                _insert_for(db)(User)
                .values(id=caller.user_id, username=caller.username, created_at=utcnow())
                .on_conflict_do_nothing(index_elements=[User.id])
            )
            if result.rowcount:
                logger.info("Provisioned user %s", caller.user_id)
            user = await db.get(User, caller.user_id)
        if caller.username and user.username != caller.username:
            user.username = caller.username
            await db.flush()
        return user

    async def user_exists(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
