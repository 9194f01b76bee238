"""Notification API routes.

Endpoints for:
- GET /notifications - List user notifications
- GET /notifications/unread-count - Get unread count
- POST /notifications/{notification_id}/read - Mark one as read
- POST /notifications/mark-all-read - Mark all as read
"""

from uuid import UUID

from fastapi import APIRouter

from threadboard.auth.dependencies import CurrentUser
from threadboard.core.context import bind_resource
from threadboard.notifications.dependencies import (
    NotificationServiceDep,
    handle_notification_error,
)
from threadboard.notifications.schemas import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from threadboard.notifications.service import NotificationNotFoundError


router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
)


@router.get(
    "",
    response_model=list[NotificationResponse],
    summary="List user notifications",
)
async def list_notifications(
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> list[NotificationResponse]:
    """List notifications for the current user, newest first."""
    return await service.get_notifications(user_id=current_user.id)


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
async def get_unread_count(
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> UnreadCountResponse:
    """Get unread notification count. Clients poll this endpoint."""
    count = await service.get_unread_count(user_id=current_user.id)
    return UnreadCountResponse(count=count)


@router.post(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications as read",
)
async def mark_all_read(
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> MarkAllReadResponse:
    """Mark all notifications as read."""
    marked_count = await service.mark_all_as_read(user_id=current_user.id)
    return MarkAllReadResponse(count=marked_count)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark notification as read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_notification_read(
    notification_id: UUID,
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> NotificationResponse:
    """Mark one of the current user's notifications as read."""
    bind_resource(notification_id=notification_id)
    try:
        return await service.mark_as_read(
            user_id=current_user.id,
            notification_id=notification_id,
        )
    except NotificationNotFoundError as e:
        raise handle_notification_error(e) from e
