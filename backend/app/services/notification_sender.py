"""
ScanPlant Backend — Notification Sender Interface
===================================================

What:  Abstract delivery channel for notifications, plus the in-app channel
       used by default.
How:   NotificationService persists a notification as Pending, awaits
       sender.dispatch(notification), and only then marks it Sent. A sender
       signals failure by raising (NotificationDispatchError for channel
       errors); the service does not catch or retry, so the request fails
       and its transaction rolls back.
Who:   Injected into NotificationService; tests pass an AsyncMock.
"""

import logging
from abc import ABC, abstractmethod

from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationSender(ABC):
    """
    Contract for notification delivery channels.

    Implementations:
        - InAppNotificationSender: nothing leaves the process; the
          notification becomes visible through the notifications API
    """

    channel: str = "abstract"

    @abstractmethod
    async def dispatch(self, notification: Notification) -> None:
        """
        Deliver one notification.

        Completes normally on success; no payload is returned. Raises on
        failure (NotificationDispatchError for channel-level errors).
        """
        ...


class InAppNotificationSender(NotificationSender):
    """In-app channel: delivery is the row itself, readable via the API."""

    channel = "in_app"

    async def dispatch(self, notification: Notification) -> None:
        logger.info(
            "Notification %s available in-app for user %s (type=%s)",
            notification.id,
            notification.user_id,
            notification.type,
        )


# ── Default Instance ──────────────────────────────────────────────────────
notification_sender: NotificationSender = InAppNotificationSender()
