"""Notifications module for user notifications.

Provides:
- Reply notifications raised when someone answers another user's comment
- Notification listing and unread count for polling clients
- Mark as read functionality

Note: Router is imported directly in main.py to avoid circular imports.
"""

from threadboard.notifications.models import (
    NOTIFICATIONS_TABLES_CQL,
    Notification,
    NotificationType,
)
from threadboard.notifications.schemas import NotificationResponse
from threadboard.notifications.service import NotificationService


__all__ = [
    "NOTIFICATIONS_TABLES_CQL",
    "Notification",
    "NotificationResponse",
    "NotificationService",
    "NotificationType",
]
