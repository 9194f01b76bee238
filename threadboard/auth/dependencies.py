"""FastAPI dependencies for authentication.

Provides dependency injection for:
- AuthService lookup from application state
- Current user extraction from the Bearer JWT
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from threadboard.auth.schemas import AuthenticatedUser
from threadboard.auth.security import decode_access_token
from threadboard.auth.service import AuthService
from threadboard.core.context import bind_user


def get_auth_service(request: Request) -> AuthService:
    """Get AuthService from app state."""
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Auth service not available",
        )
    return service


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message, "code": "not_authenticated"},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> AuthenticatedUser:
    """Get current authenticated user from JWT token.

    Identity comes entirely from the verified token claims.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise _unauthorized("Access token not provided")

    try:
        payload = decode_access_token(token)
        user = AuthenticatedUser(
            id=UUID(payload["sub"]),
            username=payload["username"],
            email=payload["email"],
        )
    except (JWTError, KeyError, ValueError) as e:
        raise _unauthorized("Invalid or expired token") from e

    bind_user(user.id)
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
