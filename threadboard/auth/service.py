"""Authentication service layer.

Business logic for:
- User registration and login
- Access token issuing
- User queries
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from threadboard.auth.models import User, utc_now
from threadboard.auth.schemas import AuthResponse, RegisterRequest, UserResponse
from threadboard.auth.security import (
    create_access_token,
    hash_password,
    verify_password,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class AuthError(Exception):
    """Base authentication error."""

    def __init__(self, message: str, code: str = "auth_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Invalid email or password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, "invalid_credentials")


class UserExistsError(AuthError):
    """User already exists (email or username)."""

    def __init__(self, message: str = "User already exists", field: str = "email"):
        super().__init__(message, f"{field}_exists")
        self.field = field


class UserNotFoundError(AuthError):
    """User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message, "user_not_found")


# ==============================================================================
# Auth Service
# ==============================================================================


class AuthService:
    """Authentication service for user management and token operations."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session.

        Args:
            session: Cassandra driver session with aexecute()
            keyspace: Keyspace name for queries
        """
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for better performance."""
        self._get_user_by_email = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE email = ?"
        )
        self._get_user_by_username = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE username = ?"
        )
        self._get_user_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE id = ?"
        )
        self._insert_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.users
            (id, username, email, password_hash, is_verified, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_user_password = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET password_hash = ?, updated_at = ?
            WHERE id = ?
        """)

    # ==========================================================================
    # User Operations
    # ==========================================================================

    async def get_user_by_email(self, email: str) -> User | None:
        """Find user by email address."""
        rows = await self.session.aexecute(
            self._get_user_by_email, [email.lower().strip()]
        )
        row = rows.one()
        return User.from_row(row) if row else None

    async def get_user_by_username(self, username: str) -> User | None:
        """Find user by username (exact match)."""
        rows = await self.session.aexecute(
            self._get_user_by_username, [username.strip()]
        )
        row = rows.one()
        return User.from_row(row) if row else None

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""
        rows = await self.session.aexecute(self._get_user_by_id, [user_id])
        row = rows.one()
        return User.from_row(row) if row else None

    async def register_user(self, data: RegisterRequest) -> User:
        """Register a new user.

        Uniqueness is checked against the secondary indexes before insert.

        Raises:
            UserExistsError: If email or username already exists
        """
        if await self.get_user_by_email(data.email):
            raise UserExistsError("Email is already registered", field="email")

        if await self.get_user_by_username(data.username):
            raise UserExistsError("Username is already taken", field="username")

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
        )
        user.updated_at = user.created_at

        await self.session.aexecute(
            self._insert_user,
            [
                user.id,
                user.username,
                user.email,
                user.password_hash,
                user.is_verified,
                user.created_at,
                user.updated_at,
            ],
        )
        logger.info("user_registered", registered_user_id=str(user.id))
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """Authenticate a user by email and password.

        Transparently upgrades the stored hash when Argon2 parameters changed.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        user = await self.get_user_by_email(email)
        if user is None:
            raise InvalidCredentialsError

        is_valid, new_hash = verify_password(password, user.password_hash)
        if not is_valid:
            logger.info("login_failed", attempted_user_id=str(user.id))
            raise InvalidCredentialsError

        if new_hash:
            user.password_hash = new_hash
            user.updated_at = utc_now()
            await self.session.aexecute(
                self._update_user_password, [new_hash, user.updated_at, user.id]
            )
            logger.info("password_rehashed", rehashed_user_id=str(user.id))

        return user

    # ==========================================================================
    # Token Operations
    # ==========================================================================

    def create_access_token_for(self, user: User) -> str:
        """Issue an access token carrying the user's identity claims."""
        return create_access_token(
            {"sub": str(user.id), "username": user.username, "email": user.email}
        )

    def build_auth_response(self, user: User) -> AuthResponse:
        """Build the register/login response for a user."""
        return AuthResponse(
            access_token=self.create_access_token_for(user),
            user=UserResponse.from_user(user),
        )
