"""Threaded comment board.

Provides:
- Reply tree assembly with orphan promotion
- 15-minute edit, delete and undo-delete windows
- Soft delete state machine with owner-only mutations

Note: Router is imported directly in main.py to avoid circular imports.
"""

from threadboard.comments.models import COMMENTS_TABLES_CQL, Comment
from threadboard.comments.permissions import (
    GRACE_PERIOD,
    CommentPermissions,
    evaluate_permissions,
)
from threadboard.comments.service import CommentService
from threadboard.comments.tree import CommentNode, build_comment_tree


__all__ = [
    "COMMENTS_TABLES_CQL",
    "GRACE_PERIOD",
    "Comment",
    "CommentNode",
    "CommentPermissions",
    "CommentService",
    "build_comment_tree",
    "evaluate_permissions",
]
