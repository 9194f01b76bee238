"""Pydantic schemas for the comment board.

JSON field names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from threadboard.comments.models import Comment
from threadboard.comments.permissions import evaluate_permissions
from threadboard.comments.tree import CommentNode
from threadboard.core.schemas import CamelModel


# ==============================================================================
# Request Schemas
# ==============================================================================


def _reject_blank(v: str) -> str:
    if not v.strip():
        msg = "Content cannot be empty"
        raise ValueError(msg)
    return v


class CreateCommentRequest(CamelModel):
    """Request to create a comment or a reply."""

    content: str
    parent_id: UUID | None = Field(None, description="Comment being replied to")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject empty or whitespace-only content."""
        return _reject_blank(v)


class UpdateCommentRequest(CamelModel):
    """Request to update a comment's content."""

    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject empty or whitespace-only content."""
        return _reject_blank(v)


# ==============================================================================
# Response Schemas
# ==============================================================================


class AuthorResponse(CamelModel):
    """Comment author info."""

    id: UUID
    username: str


class CommentResponse(CamelModel):
    """Comment with time-window flags and nested replies."""

    id: UUID
    content: str
    author_id: UUID
    author: AuthorResponse
    parent_id: UUID | None = None
    is_deleted: bool
    deleted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    can_edit: bool
    can_delete: bool
    can_undo_delete: bool
    children: list["CommentResponse"] = Field(default_factory=list)

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        now: datetime,
        children: list["CommentResponse"] | None = None,
    ) -> "CommentResponse":
        """Build a response, evaluating the permission flags at `now`."""
        permissions = evaluate_permissions(comment, now)
        return cls(
            id=comment.comment_id,
            content=comment.content,
            author_id=comment.author_id,
            author=AuthorResponse(
                id=comment.author_id, username=comment.author_username
            ),
            parent_id=comment.parent_id,
            is_deleted=comment.is_deleted,
            deleted_at=comment.deleted_at,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            can_edit=permissions.can_edit,
            can_delete=permissions.can_delete,
            can_undo_delete=permissions.can_undo_delete,
            children=children or [],
        )

    @classmethod
    def from_node(cls, node: CommentNode, now: datetime) -> "CommentResponse":
        """Build a response for a tree node and all of its descendants."""
        return cls.from_comment(
            node.comment,
            now,
            children=[cls.from_node(child, now) for child in node.children],
        )


CommentResponse.model_rebuild()
