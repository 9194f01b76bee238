"""Pydantic schemas for authentication.

Request and response models for:
- User registration and login
- Token responses
- Current user profile
"""

from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from threadboard.auth.validators import validate_password, validate_username
from threadboard.core.schemas import CamelModel


# ==============================================================================
# Request Schemas
# ==============================================================================


class RegisterRequest(CamelModel):
    """User registration request."""

    username: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    @field_validator("username")
    @classmethod
    def validate_username_format(cls, v: str) -> str:
        result = validate_username(v)
        if not result.valid:
            msg = result.message or "Invalid username"
            raise ValueError(msg)
        return result.formatted or v

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        result = validate_password(v)
        if not result.valid:
            msg = result.message or "Invalid password"
            raise ValueError(msg)
        return v


class LoginRequest(CamelModel):
    """User login request."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")


# ==============================================================================
# Response Schemas
# ==============================================================================


class UserResponse(CamelModel):
    """Public user profile."""

    id: UUID
    username: str
    email: str
    is_verified: bool

    @classmethod
    def from_user(cls, user: "User") -> "UserResponse":  # noqa: F821
        """Create response from User entity."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            is_verified=user.is_verified,
        )


class AuthResponse(CamelModel):
    """Access token plus the user it belongs to."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class AuthenticatedUser(CamelModel):
    """Identity resolved from a verified access token."""

    id: UUID
    username: str
    email: str
