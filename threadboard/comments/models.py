"""Database models for the threaded comment board.

Architecture: Adjacency List pattern for hierarchical comments
- parent_id references the parent comment (NULL for root comments)
- Author username is denormalized onto each row for read-heavy listing
- Soft delete keeps the row and stamps deleted_at
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from threadboard.auth.models import ensure_utc_aware, utc_now


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Single board, so one row per comment keyed by id. Listing is a full scan
# ordered in the application by created_at.
COMMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    comment_id UUID PRIMARY KEY,
    parent_id UUID,
    author_id UUID,
    author_username TEXT,
    content TEXT,
    is_deleted BOOLEAN,
    deleted_at TIMESTAMP,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Index for fetching direct replies of a comment
COMMENT_PARENT_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS comments_parent_idx
ON {keyspace}.comments (parent_id)
"""

# Index for fetching comments by author
COMMENT_AUTHOR_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS comments_author_idx
ON {keyspace}.comments (author_id)
"""

COMMENTS_TABLES_CQL = [
    COMMENT_TABLE_CQL,
    COMMENT_PARENT_INDEX_CQL,
    COMMENT_AUTHOR_INDEX_CQL,
]


# ==============================================================================
# Entities
# ==============================================================================


@dataclass
class Comment:
    """Comment entity.

    A comment is Active while is_deleted is False and SoftDeleted otherwise.
    deleted_at is set exactly when is_deleted is True.
    """

    comment_id: UUID
    parent_id: UUID | None
    author_id: UUID
    author_username: str
    content: str
    is_deleted: bool
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        author_id: UUID,
        author_username: str,
        content: str,
        parent_id: UUID | None = None,
        now: datetime | None = None,
    ) -> "Comment":
        """Build a new active comment stamped at `now`."""
        created_at = now or utc_now()
        return cls(
            comment_id=uuid4(),
            parent_id=parent_id,
            author_id=author_id,
            author_username=author_username,
            content=content,
            is_deleted=False,
            deleted_at=None,
            created_at=created_at,
            updated_at=created_at,
        )

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        """Create Comment from Cassandra row."""
        created_at = ensure_utc_aware(row.created_at)
        return cls(
            comment_id=row.comment_id,
            parent_id=row.parent_id,
            author_id=row.author_id,
            author_username=row.author_username or "unknown",
            content=row.content,
            is_deleted=bool(row.is_deleted),
            deleted_at=ensure_utc_aware(row.deleted_at),
            created_at=created_at,
            updated_at=ensure_utc_aware(row.updated_at) or created_at,
        )
