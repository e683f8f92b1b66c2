"""
ScanPlant Backend — Ownership Policy
======================================

What:  The single predicate deciding whether a caller may read or mutate a
       record owned by someone else, plus the Caller value object every
       service operation receives.
Who:   Applied by PlantService, CommentService and NotificationService before
       every mutation. ReminderService scopes its queries to the caller
       directly and has no admin override.

The caller identity is resolved upstream (authentication gateway) and handed
in as (user_id, is_admin); nothing here authenticates.
"""

from typing import Optional

from pydantic import BaseModel


def can_access(resource_owner_id: Optional[str], caller_id: str, is_admin: bool) -> bool:
    """True iff the caller is an admin or owns the resource."""
    return is_admin or resource_owner_id == caller_id


class Caller(BaseModel):
    """Resolved identity of whoever is invoking a service operation."""

    user_id: str
    is_admin: bool = False
    username: Optional[str] = None

    model_config = {"frozen": True}

    def can_access(self, resource_owner_id: Optional[str]) -> bool:
        return can_access(resource_owner_id, self.user_id, self.is_admin)
