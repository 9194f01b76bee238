"""Python client for the Threadboard API with notification polling."""

from threadboard.client.api import (
    BoardAPIError,
    BoardClient,
    BoardClientError,
    BoardConnectionError,
)
from threadboard.client.poller import UnreadCountPoller
from threadboard.client.session import AuthSession


__all__ = [
    "AuthSession",
    "BoardAPIError",
    "BoardClient",
    "BoardClientError",
    "BoardConnectionError",
    "UnreadCountPoller",
]
