"""Authentication API endpoints.

Provides routes for:
- User registration and login
- Current user profile
"""

from fastapi import APIRouter, HTTPException, status

from threadboard.auth.dependencies import AuthServiceDep, CurrentUser
from threadboard.auth.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from threadboard.auth.service import (
    AuthError,
    InvalidCredentialsError,
    UserExistsError,
    UserNotFoundError,
)


router = APIRouter(prefix="/auth", tags=["auth"])


def handle_auth_error(error: AuthError) -> HTTPException:
    """Convert AuthError to HTTPException.

    For UserExistsError, the detail also names the conflicting field.
    """
    status_map = {
        "invalid_credentials": status.HTTP_401_UNAUTHORIZED,
        "user_not_found": status.HTTP_404_NOT_FOUND,
        "email_exists": status.HTTP_409_CONFLICT,
        "username_exists": status.HTTP_409_CONFLICT,
        "auth_error": status.HTTP_400_BAD_REQUEST,
    }

    detail: dict[str, str] = {"message": error.message, "code": error.code}
    field = getattr(error, "field", None)
    if field:
        detail["field"] = field

    headers = None
    if isinstance(error, InvalidCredentialsError):
        headers = {"WWW-Authenticate": "Bearer"}

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=detail,
        headers=headers,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    responses={
        400: {"description": "Validation error"},
        409: {"description": "Email or username already exists"},
    },
)
async def register(
    data: RegisterRequest,
    auth_service: AuthServiceDep,
) -> AuthResponse:
    """Register a new user account and log it in."""
    try:
        user = await auth_service.register_user(data)
    except UserExistsError as e:
        raise handle_auth_error(e) from e
    return auth_service.build_auth_response(user)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="User login",
    responses={401: {"description": "Invalid credentials"}},
)
async def login(
    data: LoginRequest,
    auth_service: AuthServiceDep,
) -> AuthResponse:
    """Authenticate user and return an access token."""
    try:
        user = await auth_service.authenticate_user(data.email, data.password)
    except InvalidCredentialsError as e:
        raise handle_auth_error(e) from e
    return auth_service.build_auth_response(user)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "User no longer exists"},
    },
)
async def get_me(
    current_user: CurrentUser,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Return the profile of the authenticated user."""
    user = await auth_service.get_user_by_id(current_user.id)
    if user is None:
        raise handle_auth_error(UserNotFoundError())
    return UserResponse.from_user(user)
