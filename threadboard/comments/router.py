"""Comment board API endpoints.

Provides routes for:
- Board listing as a reply tree
- Comment create, edit, soft delete and undo
"""

from uuid import UUID

from fastapi import APIRouter, Response, status

from threadboard.auth.dependencies import CurrentUser
from threadboard.comments.dependencies import CommentServiceDep, handle_comment_error
from threadboard.comments.schemas import (
    CommentResponse,
    CreateCommentRequest,
    UpdateCommentRequest,
)
from threadboard.comments.service import CommentError
from threadboard.core.context import bind_resource


router = APIRouter(prefix="/comments", tags=["comments"])


@router.get(
    "",
    response_model=list[CommentResponse],
    summary="List comments as a tree",
)
async def list_comments(
    comment_service: CommentServiceDep,
) -> list[CommentResponse]:
    """Get every comment, nested under its parent.

    Deleted comments are included with isDeleted set.
    """
    return await comment_service.get_comments()


@router.get(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Get comment",
    responses={404: {"description": "Comment not found"}},
)
async def get_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
) -> CommentResponse:
    """Get a comment with its direct replies."""
    bind_resource(comment_id=comment_id)
    try:
        return await comment_service.get_comment(comment_id)
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
    responses={404: {"description": "Parent comment not found"}},
)
async def create_comment(
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Create a comment, or a reply when parentId is given.

    Replying to another user's comment notifies that user.
    """
    try:
        return await comment_service.create_comment(
            author_id=user.id,
            author_username=user.username,
            content=data.content,
            parent_id=data.parent_id,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.put(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Update comment",
    responses={
        403: {"description": "Not the author, or edit window expired"},
        404: {"description": "Comment not found"},
    },
)
async def update_comment(
    comment_id: UUID,
    data: UpdateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Edit a comment within 15 minutes of creation."""
    bind_resource(comment_id=comment_id)
    try:
        return await comment_service.update_comment(
            comment_id=comment_id,
            content=data.content,
            user_id=user.id,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.delete(
    "/{comment_id}",
    response_class=Response,
    summary="Delete comment",
    responses={
        403: {"description": "Not the author, or delete window expired"},
        404: {"description": "Comment not found"},
    },
)
async def delete_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> Response:
    """Soft delete a comment within 15 minutes of creation."""
    bind_resource(comment_id=comment_id)
    try:
        await comment_service.delete_comment(comment_id=comment_id, user_id=user.id)
    except CommentError as e:
        raise handle_comment_error(e) from e
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/{comment_id}/undo-delete",
    response_model=CommentResponse,
    summary="Undo comment deletion",
    responses={
        403: {"description": "Not the author, not deleted, or undo window expired"},
        404: {"description": "Comment not found"},
    },
)
async def undo_delete_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Restore a comment within 15 minutes of its deletion."""
    bind_resource(comment_id=comment_id)
    try:
        return await comment_service.undo_delete_comment(
            comment_id=comment_id, user_id=user.id
        )
    except CommentError as e:
        raise handle_comment_error(e) from e
