"""HTTP client for the Threadboard API.

Wraps httpx.AsyncClient and maps responses onto the same Pydantic
schemas the server uses, so callers get typed objects back.
"""

from typing import Any
from uuid import UUID

import httpx
import structlog

from threadboard.auth.schemas import AuthResponse, UserResponse
from threadboard.comments.schemas import CommentResponse
from threadboard.config.settings import get_settings
from threadboard.notifications.schemas import (
    MarkAllReadResponse,
    NotificationResponse,
)


logger = structlog.get_logger(__name__)


class BoardClientError(Exception):
    """Base error for client failures."""


class BoardConnectionError(BoardClientError):
    """The API could not be reached or did not answer in time."""


class BoardAPIError(BoardClientError):
    """The API answered with an error status.

    Attributes:
        status_code: HTTP status code
        message: Human readable message from the response body
        code: Machine readable code (e.g. "edit_window_expired"), if any
    """

    def __init__(self, status_code: int, message: str, code: str | None = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"{status_code}: {message}")


class BoardClient:
    """Async client for the comment board and notification endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        api_prefix: str | None = None,
        timeout: float | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Create a client.

        Args:
            base_url: Server root URL (default from settings)
            api_prefix: Route prefix (default from settings)
            timeout: Request timeout in seconds (default from settings)
            token: Bearer token sent with every request, if set
            transport: Custom httpx transport, used by tests
        """
        settings = get_settings()
        self.api_prefix = settings.api_prefix if api_prefix is None else api_prefix
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.client_base_url,
            timeout=timeout or settings.client_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "BoardClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.api_prefix}{path}"
        try:
            response = await self._client.request(
                method, url, json=json, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.error("board_api_timeout", method=method, path=url, error=str(e))
            raise BoardConnectionError(f"Request to {url} timed out") from e
        except httpx.RequestError as e:
            logger.error("board_api_request_error", method=method, path=url, error=str(e))
            raise BoardConnectionError(f"Request to {url} failed: {e}") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise BoardAPIError(
                response.status_code,
                body.get("message") or response.reason_phrase,
                body.get("code"),
            )

        if not response.content:
            return None
        return response.json()

    # ==========================================================================
    # Auth
    # ==========================================================================

    async def register(self, username: str, email: str, password: str) -> AuthResponse:
        data = await self._request(
            "POST",
            "/auth/register",
            {"username": username, "email": email, "password": password},
        )
        return AuthResponse.model_validate(data)

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._request(
            "POST", "/auth/login", {"email": email, "password": password}
        )
        return AuthResponse.model_validate(data)

    async def me(self) -> UserResponse:
        return UserResponse.model_validate(await self._request("GET", "/auth/me"))

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def list_comments(self) -> list[CommentResponse]:
        data = await self._request("GET", "/comments")
        return [CommentResponse.model_validate(item) for item in data]

    async def get_comment(self, comment_id: UUID) -> CommentResponse:
        data = await self._request("GET", f"/comments/{comment_id}")
        return CommentResponse.model_validate(data)

    async def create_comment(
        self, content: str, parent_id: UUID | None = None
    ) -> CommentResponse:
        payload: dict[str, Any] = {"content": content}
        if parent_id is not None:
            payload["parentId"] = str(parent_id)
        data = await self._request("POST", "/comments", payload)
        return CommentResponse.model_validate(data)

    async def update_comment(self, comment_id: UUID, content: str) -> CommentResponse:
        data = await self._request(
            "PUT", f"/comments/{comment_id}", {"content": content}
        )
        return CommentResponse.model_validate(data)

    async def delete_comment(self, comment_id: UUID) -> None:
        await self._request("DELETE", f"/comments/{comment_id}")

    async def undo_delete_comment(self, comment_id: UUID) -> CommentResponse:
        data = await self._request("POST", f"/comments/{comment_id}/undo-delete")
        return CommentResponse.model_validate(data)

    # ==========================================================================
    # Notifications
    # ==========================================================================

    async def list_notifications(self) -> list[NotificationResponse]:
        data = await self._request("GET", "/notifications")
        return [NotificationResponse.model_validate(item) for item in data]

    async def get_unread_count(self) -> int:
        data = await self._request("GET", "/notifications/unread-count")
        return int(data["count"])

    async def mark_notification_read(
        self, notification_id: UUID
    ) -> NotificationResponse:
        data = await self._request("POST", f"/notifications/{notification_id}/read")
        return NotificationResponse.model_validate(data)

    async def mark_all_notifications_read(self) -> MarkAllReadResponse:
        data = await self._request("POST", "/notifications/mark-all-read")
        return MarkAllReadResponse.model_validate(data)
