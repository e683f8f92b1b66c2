"""
ScanPlant Backend — Request Dependencies
==========================================

What:  FastAPI dependency that turns gateway headers into a Caller.
How:   The authentication gateway in front of this service resolves the
       user and forwards:
           X-User-Id     opaque user id (required)
           X-User-Name   display name (optional)
           X-User-Roles  comma-separated role names (optional)
       A caller whose roles include settings.admin_role is an admin.
       The caller's users row is provisioned on first sight.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import AuthenticationRequiredError
from app.services.ownership import Caller
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


def parse_roles(header_value: Optional[str]) -> set[str]:
    if not header_value:
        return set()
    return {role.strip() for role in header_value.split(",") if role.strip()}


async def get_caller(
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    x_user_roles: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> Caller:
    """
    Raises:
        AuthenticationRequiredError: no X-User-Id header (401)
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationRequiredError()

    caller = Caller(
        user_id=x_user_id.strip(),
        is_admin=settings.admin_role in parse_roles(x_user_roles),
        username=(x_user_name or "").strip() or None,
    )
    await user_service.ensure_user(db, caller)
    return caller
