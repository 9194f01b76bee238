"""Logged-in client session that owns the notification poller.

Polling starts when the session authenticates and is cancelled when it
logs out or closes, so no poll outlives the token it was started with.
"""

from datetime import datetime

import structlog

from threadboard.auth.schemas import AuthResponse, UserResponse
from threadboard.auth.security import get_token_expiration
from threadboard.client.api import BoardClient
from threadboard.client.poller import NewNotificationsCallback, UnreadCountPoller


logger = structlog.get_logger(__name__)


class AuthSession:
    """Authenticated session over a BoardClient.

    Usage:
        async with AuthSession(on_new_notifications=show_toast) as session:
            await session.login("ana@example.com", "secret123")
            ...
    """

    def __init__(
        self,
        client: BoardClient | None = None,
        on_new_notifications: NewNotificationsCallback | None = None,
        poll_interval_seconds: float | None = None,
    ):
        self.client = client or BoardClient()
        self.user: UserResponse | None = None
        self.poller = UnreadCountPoller(
            self.client.get_unread_count,
            on_new=on_new_notifications,
            interval_seconds=poll_interval_seconds,
        )

    async def __aenter__(self) -> "AuthSession":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.client.token is not None

    @property
    def token_expires_at(self) -> datetime | None:
        """Expiry of the current access token, if logged in."""
        if not self.client.token:
            return None
        return get_token_expiration(self.client.token)

    async def login(self, email: str, password: str) -> UserResponse:
        """Log in and start polling for notifications."""
        return await self._begin(await self.client.login(email, password))

    async def register(self, username: str, email: str, password: str) -> UserResponse:
        """Create an account, log in and start polling for notifications."""
        return await self._begin(
            await self.client.register(username, email, password)
        )

    async def _begin(self, auth: AuthResponse) -> UserResponse:
        # A previous login's poller must not keep running with the old baseline
        await self.poller.stop()
        self.client.token = auth.access_token
        self.user = auth.user
        await self.poller.start()
        logger.info("session_started", session_user_id=str(auth.user.id))
        return auth.user

    async def logout(self) -> None:
        """Cancel polling and drop the token."""
        await self.poller.stop()
        if self.user is not None:
            logger.info("session_ended", session_user_id=str(self.user.id))
        self.client.token = None
        self.user = None

    async def aclose(self) -> None:
        """Log out and close the HTTP client."""
        await self.logout()
        await self.client.aclose()
