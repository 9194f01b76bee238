"""Per-request identifiers shared with the log pipeline.

Identifiers are bound through ``structlog.contextvars`` so that every event
logged while a request is handled carries them, whichever module logs it.
The request id is also held in its own variable because error responses
echo it back to the client.
"""

from contextvars import ContextVar
from uuid import UUID, uuid4

import structlog


_request_id: ContextVar[str | None] = ContextVar("threadboard_request_id", default=None)


def bind_request_id(request_id: str | None = None) -> str:
    """Start a clean log context for a request.

    A caller-supplied id is kept so traces can be followed across services;
    otherwise a fresh UUID is minted.
    """
    rid = request_id or str(uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=rid)
    _request_id.set(rid)
    return rid


def current_request_id() -> str | None:
    return _request_id.get()


def bind_user(user_id: UUID | str) -> None:
    """Tag the rest of the request's log events with the acting user."""
    structlog.contextvars.bind_contextvars(user_id=str(user_id))


def bind_resource(**ids: UUID) -> None:
    """Tag log events with the comment or notification a route acts on."""
    structlog.contextvars.bind_contextvars(
        **{key: str(value) for key, value in ids.items()}
    )


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
    _request_id.set(None)
