"""Database models for notifications.

Notification types:
- REPLY: Someone replied to the user's comment
- MENTION: Reserved; nothing produces it yet
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from threadboard.auth.models import ensure_utc_aware, utc_now


class NotificationType(str, Enum):
    """Types of notifications."""

    REPLY = "reply"
    MENTION = "mention"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partitioned by recipient so every read is a single-partition query
NOTIFICATION_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.notifications (
    user_id UUID,
    created_at TIMESTAMP,
    notification_id UUID,
    type TEXT,
    message TEXT,
    triggered_by_id UUID,
    triggered_by_username TEXT,
    comment_id UUID,
    is_read BOOLEAN,
    read_at TIMESTAMP,
    PRIMARY KEY ((user_id), created_at, notification_id)
) WITH CLUSTERING ORDER BY (created_at DESC, notification_id ASC)
"""

NOTIFICATIONS_TABLES_CQL = [
    NOTIFICATION_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Notification:
    """Notification entity."""

    notification_id: UUID
    user_id: UUID
    type: NotificationType
    message: str
    triggered_by_id: UUID | None
    triggered_by_username: str | None
    comment_id: UUID | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "Notification":
        """Create Notification from Cassandra row."""
        return cls(
            notification_id=row.notification_id,
            user_id=row.user_id,
            type=NotificationType(row.type),
            message=row.message,
            triggered_by_id=row.triggered_by_id,
            triggered_by_username=row.triggered_by_username,
            comment_id=row.comment_id,
            is_read=row.is_read or False,
            read_at=ensure_utc_aware(row.read_at),
            created_at=ensure_utc_aware(row.created_at),
        )


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_notification(
    user_id: UUID,
    notification_type: NotificationType,
    message: str,
    triggered_by_id: UUID | None = None,
    triggered_by_username: str | None = None,
    comment_id: UUID | None = None,
    now: datetime | None = None,
) -> Notification:
    """Create a new unread notification."""
    return Notification(
        notification_id=uuid4(),
        user_id=user_id,
        type=notification_type,
        message=message,
        triggered_by_id=triggered_by_id,
        triggered_by_username=triggered_by_username,
        comment_id=comment_id,
        is_read=False,
        read_at=None,
        created_at=now or utc_now(),
    )


def create_reply_notification(
    comment_author_id: UUID,
    replier_id: UUID,
    replier_username: str,
    parent_comment_id: UUID,
    now: datetime | None = None,
) -> Notification:
    """Create a notification telling a comment's author about a reply to it."""
    return create_notification(
        user_id=comment_author_id,
        notification_type=NotificationType.REPLY,
        message=f"{replier_username} replied to your comment",
        triggered_by_id=replier_id,
        triggered_by_username=replier_username,
        comment_id=parent_comment_id,
        now=now,
    )
