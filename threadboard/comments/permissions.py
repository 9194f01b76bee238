"""Time-window permissions for comments.

All windows are closed intervals: an action exactly at the boundary is
allowed, one millisecond later it is not. `now` is always passed in so the
same instant is used for every flag computed in one request.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from threadboard.comments.models import Comment


GRACE_PERIOD = timedelta(minutes=15)

# Edit and delete are separate policies that currently share one constant.
EDIT_WINDOW = GRACE_PERIOD
DELETE_WINDOW = GRACE_PERIOD
UNDO_DELETE_WINDOW = GRACE_PERIOD


@dataclass(frozen=True)
class CommentPermissions:
    """Time-based action flags for a comment at a given instant.

    Flags ignore ownership; the service checks authorship separately.
    """

    can_edit: bool
    can_delete: bool
    can_undo_delete: bool


def can_edit(comment: Comment, now: datetime) -> bool:
    """Edit is allowed up to EDIT_WINDOW after creation, deleted or not."""
    return now - comment.created_at <= EDIT_WINDOW


def can_delete(comment: Comment, now: datetime) -> bool:
    """Delete is allowed up to DELETE_WINDOW after creation, deleted or not."""
    return now - comment.created_at <= DELETE_WINDOW


def can_undo_delete(comment: Comment, now: datetime) -> bool:
    """Undo is allowed on a deleted comment up to UNDO_DELETE_WINDOW after deletion."""
    if not comment.is_deleted or comment.deleted_at is None:
        return False
    return now - comment.deleted_at <= UNDO_DELETE_WINDOW


def evaluate_permissions(comment: Comment, now: datetime) -> CommentPermissions:
    """Compute all three flags for `comment` at `now`."""
    return CommentPermissions(
        can_edit=can_edit(comment, now),
        can_delete=can_delete(comment, now),
        can_undo_delete=can_undo_delete(comment, now),
    )
