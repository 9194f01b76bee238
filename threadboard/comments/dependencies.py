"""FastAPI dependencies for the comment board.

Provides dependency injection for:
- Comment service
- Error translation
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from threadboard.comments.service import CommentError, CommentService


async def get_comment_service(request: Request) -> CommentService:
    """Get comment service from app state."""
    service = getattr(request.app.state, "comment_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Comment service not available",
        )
    return service


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


def handle_comment_error(error: CommentError) -> HTTPException:
    """Convert comment errors to HTTP exceptions.

    Ownership failures and expired windows share 403; clients tell them
    apart by the `code` in the response body.
    """
    status_map = {
        "comment_not_found": status.HTTP_404_NOT_FOUND,
        "parent_not_found": status.HTTP_404_NOT_FOUND,
        "not_comment_author": status.HTTP_403_FORBIDDEN,
        "edit_window_expired": status.HTTP_403_FORBIDDEN,
        "delete_window_expired": status.HTTP_403_FORBIDDEN,
        "undo_window_expired": status.HTTP_403_FORBIDDEN,
        "comment_not_deleted": status.HTTP_403_FORBIDDEN,
        "invalid_content": status.HTTP_400_BAD_REQUEST,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"message": error.message, "code": error.code},
    )
