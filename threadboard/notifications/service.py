"""Notification service layer.

Business logic for:
- Reply notifications raised by the comment service
- Listing, counting and marking notifications as read
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from threadboard.auth.models import utc_now
from threadboard.notifications.models import (
    Notification,
    create_reply_notification,
)
from threadboard.notifications.schemas import NotificationResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class NotificationError(Exception):
    """Base notification error."""

    def __init__(self, message: str, code: str = "notification_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotificationNotFoundError(NotificationError):
    """Notification not found in the caller's notifications."""

    def __init__(self, message: str = "Notification not found"):
        super().__init__(message, "notification_not_found")


# ==============================================================================
# Notification Service
# ==============================================================================


class NotificationService:
    """Service for notification management."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_notification = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.notifications
            (user_id, created_at, notification_id, type, message, triggered_by_id,
             triggered_by_username, comment_id, is_read, read_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        # Whole partition, newest first by clustering order
        self._get_notifications = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.notifications
            WHERE user_id = ?
        """)

        self._mark_read = self.session.prepare(f"""
            UPDATE {self.keyspace}.notifications
            SET is_read = ?, read_at = ?
            WHERE user_id = ? AND created_at = ? AND notification_id = ?
        """)

        self._count_unread = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.notifications
            WHERE user_id = ? AND is_read = ? ALLOW FILTERING
        """)

    # ==========================================================================
    # Notification Creation
    # ==========================================================================

    async def create_notification(self, notification: Notification) -> Notification:
        """Persist a notification."""
        await self.session.aexecute(
            self._insert_notification,
            [
                notification.user_id,
                notification.created_at,
                notification.notification_id,
                notification.type.value,
                notification.message,
                notification.triggered_by_id,
                notification.triggered_by_username,
                notification.comment_id,
                notification.is_read,
                notification.read_at,
            ],
        )
        logger.info(
            "notification_created",
            notification_id=str(notification.notification_id),
            recipient_id=str(notification.user_id),
            notification_type=notification.type.value,
        )
        return notification

    async def notify_reply(
        self,
        comment_author_id: UUID,
        replier_id: UUID,
        replier_username: str,
        parent_comment_id: UUID,
        now: datetime | None = None,
    ) -> Notification | None:
        """Create notification for reply to comment.

        The notification points at the comment that was replied to. `now`
        lets the caller stamp it with the same instant as the reply.

        Returns None if replier is the same as comment author.
        """
        if comment_author_id == replier_id:
            return None

        notification = create_reply_notification(
            comment_author_id=comment_author_id,
            replier_id=replier_id,
            replier_username=replier_username,
            parent_comment_id=parent_comment_id,
            now=now,
        )
        return await self.create_notification(notification)

    # ==========================================================================
    # Notification Reading
    # ==========================================================================

    async def _load_notifications(self, user_id: UUID) -> list[Notification]:
        rows = await self.session.aexecute(self._get_notifications, [user_id])
        notifications = [Notification.from_row(row) for row in rows]
        notifications.sort(
            key=lambda n: (n.created_at, str(n.notification_id)), reverse=True
        )
        return notifications

    async def get_notifications(self, user_id: UUID) -> list[NotificationResponse]:
        """Get all notifications for a user, newest first."""
        notifications = await self._load_notifications(user_id)
        return [NotificationResponse.from_notification(n) for n in notifications]

    async def get_unread_count(self, user_id: UUID) -> int:
        """Get unread notification count for user."""
        result = await self.session.aexecute(self._count_unread, [user_id, False])
        row = result.one()
        return row.count if row and row.count else 0

    # ==========================================================================
    # Mark as Read
    # ==========================================================================

    async def mark_as_read(
        self,
        user_id: UUID,
        notification_id: UUID,
    ) -> NotificationResponse:
        """Mark one of the user's notifications as read.

        The lookup is confined to the user's own partition, so another
        user's notification id is reported as not found.

        Raises:
            NotificationNotFoundError: If the user has no such notification
        """
        notifications = await self._load_notifications(user_id)
        notification = next(
            (n for n in notifications if n.notification_id == notification_id),
            None,
        )
        if notification is None:
            raise NotificationNotFoundError

        if not notification.is_read:
            now = utc_now()
            await self.session.aexecute(
                self._mark_read,
                [True, now, user_id, notification.created_at, notification_id],
            )
            notification.is_read = True
            notification.read_at = now
            logger.info(
                "notification_marked_read", notification_id=str(notification_id)
            )

        return NotificationResponse.from_notification(notification)

    async def mark_all_as_read(self, user_id: UUID) -> int:
        """Mark all notifications as read for user.

        Returns count of notifications marked as read.
        """
        now = utc_now()
        marked = 0

        for notification in await self._load_notifications(user_id):
            if notification.is_read:
                continue
            await self.session.aexecute(
                self._mark_read,
                [
                    True,
                    now,
                    user_id,
                    notification.created_at,
                    notification.notification_id,
                ],
            )
            marked += 1

        logger.info("notifications_marked_read", count=marked)
        return marked
