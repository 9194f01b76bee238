"""Pydantic schemas for notifications.

Response models for notification operations, serialized in camelCase.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from threadboard.core.schemas import CamelModel
from threadboard.notifications.models import Notification, NotificationType


# ==============================================================================
# Response Schemas
# ==============================================================================


class TriggeredByResponse(CamelModel):
    """User who caused the notification."""

    id: UUID
    username: str | None = None


class NotificationResponse(CamelModel):
    """Single notification response."""

    id: UUID = Field(description="Notification ID")
    user_id: UUID = Field(description="Recipient")
    type: NotificationType = Field(description="Notification type")
    message: str = Field(description="Display text")
    is_read: bool = Field(description="Whether notification was read")
    comment_id: UUID | None = Field(None, description="Comment that caused it")
    triggered_by_id: UUID | None = Field(None, description="Actor ID")
    triggered_by: TriggeredByResponse | None = Field(None, description="Actor")
    read_at: datetime | None = Field(None, description="When it was read")
    created_at: datetime = Field(description="When it was created")

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        """Create response from notification entity."""
        triggered_by = None
        if notification.triggered_by_id:
            triggered_by = TriggeredByResponse(
                id=notification.triggered_by_id,
                username=notification.triggered_by_username,
            )

        return cls(
            id=notification.notification_id,
            user_id=notification.user_id,
            type=notification.type,
            message=notification.message,
            is_read=notification.is_read,
            comment_id=notification.comment_id,
            triggered_by_id=notification.triggered_by_id,
            triggered_by=triggered_by,
            read_at=notification.read_at,
            created_at=notification.created_at,
        )


class UnreadCountResponse(CamelModel):
    """Unread notification count response."""

    count: int = Field(description="Number of unread notifications")


class MarkAllReadResponse(CamelModel):
    """Response after marking every notification as read."""

    message: str = "All notifications marked as read"
    count: int = Field(description="Number of notifications marked as read")
