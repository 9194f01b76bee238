"""Comment board service layer.

Business logic for:
- Comment creation with threading support
- Owner-only edit, soft delete and undo within time windows
- Reply notifications through the notification service
- Tree assembly for the board listing
"""

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from threadboard.auth.models import utc_now
from threadboard.comments.models import Comment
from threadboard.comments.permissions import can_delete, can_edit, can_undo_delete
from threadboard.comments.schemas import CommentResponse
from threadboard.comments.tree import build_comment_tree


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from threadboard.notifications.service import NotificationService


logger = structlog.get_logger(__name__)

DEFAULT_MAX_CONTENT_LENGTH = 1000


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class ParentNotFoundError(CommentError):
    """Reply target does not exist."""

    def __init__(self, message: str = "Parent comment not found"):
        super().__init__(message, "parent_not_found")


class NotCommentAuthorError(CommentError):
    """Actor is not the comment's author."""

    def __init__(self, message: str = "You can only modify your own comments"):
        super().__init__(message, "not_comment_author")


class EditWindowExpiredError(CommentError):
    """Edit window has expired."""

    def __init__(
        self, message: str = "Comment can only be edited within 15 minutes of creation"
    ):
        super().__init__(message, "edit_window_expired")


class DeleteWindowExpiredError(CommentError):
    """Delete window has expired."""

    def __init__(
        self,
        message: str = "Comment can only be deleted within 15 minutes of creation",
    ):
        super().__init__(message, "delete_window_expired")


class UndoWindowExpiredError(CommentError):
    """Undo-delete window has expired."""

    def __init__(
        self,
        message: str = "Comment can only be restored within 15 minutes of deletion",
    ):
        super().__init__(message, "undo_window_expired")


class CommentNotDeletedError(CommentError):
    """Undo requested for a comment that is not deleted."""

    def __init__(self, message: str = "Comment is not deleted"):
        super().__init__(message, "comment_not_deleted")


class InvalidContentError(CommentError):
    """Content is empty or too long."""

    def __init__(self, message: str = "Invalid comment content"):
        super().__init__(message, "invalid_content")


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for comment operations.

    The clock is injectable so time-window checks can be driven from tests.
    Every permission flag in one call is evaluated against a single instant.
    """

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        notification_service: "NotificationService | None" = None,
        clock: Callable[[], datetime] = utc_now,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    ):
        """Initialize with Cassandra session and optional notifier.

        Args:
            session: Cassandra driver session with aexecute()
            keyspace: Keyspace name for queries
            notification_service: Receives reply events; replies are not
                announced when None
            clock: Returns the current UTC time
            max_content_length: Upper bound on comment length
        """
        self.session = session
        self.keyspace = keyspace
        self.notification_service = notification_service
        self.clock = clock
        self.max_content_length = max_content_length
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for better performance."""
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments
            (comment_id, parent_id, author_id, author_username, content,
             is_deleted, deleted_at, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_comment = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.comments WHERE comment_id = ?"
        )

        self._get_all_comments = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.comments"
        )

        self._get_replies = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.comments WHERE parent_id = ?"
        )

        self._update_content = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET content = ?, updated_at = ?
            WHERE comment_id = ?
        """)

        self._set_deleted = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET is_deleted = ?, deleted_at = ?
            WHERE comment_id = ?
        """)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _validate_content(self, content: str) -> str:
        """Check content as sent; surrounding whitespace counts toward the limit."""
        if not content.strip():
            raise InvalidContentError("Content cannot be empty")
        if len(content) > self.max_content_length:
            raise InvalidContentError(
                f"Content must be at most {self.max_content_length} characters"
            )
        return content

    async def find_comment_by_id(self, comment_id: UUID) -> Comment | None:
        """Fetch a single comment, deleted or not."""
        result = await self.session.aexecute(self._get_comment, [comment_id])
        row = result.one()
        return Comment.from_row(row) if row else None

    async def _get_owned_comment(
        self, comment_id: UUID, user_id: UUID, message: str
    ) -> Comment:
        comment = await self.find_comment_by_id(comment_id)
        if comment is None:
            raise CommentNotFoundError
        if comment.author_id != user_id:
            raise NotCommentAuthorError(message)
        return comment

    @staticmethod
    def _sorted(comments: list[Comment]) -> list[Comment]:
        return sorted(comments, key=lambda c: (c.created_at, str(c.comment_id)))

    # ==========================================================================
    # Reading
    # ==========================================================================

    async def get_comments(self) -> list[CommentResponse]:
        """Get the whole board as a forest of root comments.

        Deleted comments are included. Orphaned replies appear as roots.
        """
        rows = await self.session.aexecute(self._get_all_comments)
        comments = self._sorted([Comment.from_row(row) for row in rows])
        now = self.clock()
        return [
            CommentResponse.from_node(node, now)
            for node in build_comment_tree(comments)
        ]

    async def get_comment(self, comment_id: UUID) -> CommentResponse:
        """Get one comment with its direct replies.

        Raises:
            CommentNotFoundError: If the comment does not exist
        """
        comment = await self.find_comment_by_id(comment_id)
        if comment is None:
            raise CommentNotFoundError

        rows = await self.session.aexecute(self._get_replies, [comment_id])
        replies = self._sorted([Comment.from_row(row) for row in rows])

        now = self.clock()
        return CommentResponse.from_comment(
            comment,
            now,
            children=[CommentResponse.from_comment(reply, now) for reply in replies],
        )

    # ==========================================================================
    # Mutations
    # ==========================================================================

    async def create_comment(
        self,
        author_id: UUID,
        author_username: str,
        content: str,
        parent_id: UUID | None = None,
    ) -> CommentResponse:
        """Create a root comment or a reply.

        Replying to a soft-deleted comment is allowed. When the parent
        belongs to someone else, its author gets a reply notification.

        Raises:
            InvalidContentError: If content is empty or too long
            ParentNotFoundError: If parent_id does not resolve
        """
        content = self._validate_content(content)

        parent = None
        if parent_id is not None:
            parent = await self.find_comment_by_id(parent_id)
            if parent is None:
                raise ParentNotFoundError

        now = self.clock()
        comment = Comment.create(
            author_id=author_id,
            author_username=author_username,
            content=content,
            parent_id=parent_id,
            now=now,
        )

        await self.session.aexecute(
            self._insert_comment,
            [
                comment.comment_id,
                comment.parent_id,
                comment.author_id,
                comment.author_username,
                comment.content,
                comment.is_deleted,
                comment.deleted_at,
                comment.created_at,
                comment.updated_at,
            ],
        )
        logger.info(
            "comment_created",
            comment_id=str(comment.comment_id),
            parent_id=str(parent_id) if parent_id else None,
        )

        if parent is not None and parent.author_id != author_id:
            await self._notify_reply(parent, comment, now)

        return CommentResponse.from_comment(comment, now)

    async def _notify_reply(
        self, parent: Comment, reply: Comment, now: datetime
    ) -> None:
        if self.notification_service is None:
            return
        try:
            await self.notification_service.notify_reply(
                comment_author_id=parent.author_id,
                replier_id=reply.author_id,
                replier_username=reply.author_username,
                parent_comment_id=parent.comment_id,
                now=now,
            )
        except Exception as notif_error:
            # The reply is already stored; a lost notification is not fatal
            logger.warning(
                "notification_processing_failed",
                error=str(notif_error),
                comment_id=str(reply.comment_id),
            )

    async def update_comment(
        self,
        comment_id: UUID,
        content: str,
        user_id: UUID,
    ) -> CommentResponse:
        """Replace a comment's content.

        Raises:
            CommentNotFoundError: If the comment does not exist
            NotCommentAuthorError: If user is not the author
            EditWindowExpiredError: If the edit window has passed
            InvalidContentError: If content is empty or too long
        """
        comment = await self._get_owned_comment(
            comment_id, user_id, "You can only edit your own comments"
        )

        now = self.clock()
        if not can_edit(comment, now):
            raise EditWindowExpiredError

        comment.content = self._validate_content(content)
        comment.updated_at = now

        await self.session.aexecute(
            self._update_content, [comment.content, comment.updated_at, comment_id]
        )
        logger.info("comment_updated", comment_id=str(comment_id))

        return CommentResponse.from_comment(comment, now)

    async def delete_comment(self, comment_id: UUID, user_id: UUID) -> None:
        """Soft delete a comment.

        The delete window is checked first, even for a comment that is
        already deleted. Inside the window a repeat delete changes nothing,
        so the undo window stays anchored at the first deletion.

        Raises:
            CommentNotFoundError: If the comment does not exist
            NotCommentAuthorError: If user is not the author
            DeleteWindowExpiredError: If the delete window has passed
        """
        comment = await self._get_owned_comment(
            comment_id, user_id, "You can only delete your own comments"
        )

        now = self.clock()
        if not can_delete(comment, now):
            raise DeleteWindowExpiredError

        if comment.is_deleted:
            return

        await self.session.aexecute(self._set_deleted, [True, now, comment_id])
        logger.info("comment_deleted", comment_id=str(comment_id))

    async def undo_delete_comment(
        self, comment_id: UUID, user_id: UUID
    ) -> CommentResponse:
        """Restore a soft-deleted comment.

        Raises:
            CommentNotFoundError: If the comment does not exist
            NotCommentAuthorError: If user is not the author
            CommentNotDeletedError: If the comment is not deleted
            UndoWindowExpiredError: If the undo window has passed
        """
        comment = await self._get_owned_comment(
            comment_id, user_id, "You can only undo deletion of your own comments"
        )

        now = self.clock()
        if not can_undo_delete(comment, now):
            if not comment.is_deleted:
                raise CommentNotDeletedError
            raise UndoWindowExpiredError

        await self.session.aexecute(self._set_deleted, [False, None, comment_id])
        comment.is_deleted = False
        comment.deleted_at = None
        logger.info("comment_restored", comment_id=str(comment_id))

        return CommentResponse.from_comment(comment, now)
