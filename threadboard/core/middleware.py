"""Request id propagation and access logging."""

import time
from collections.abc import Sequence

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from threadboard.core.context import bind_request_id, clear_request_context


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"


def client_ip(request: Request) -> str | None:
    """Originating address; the first X-Forwarded-For hop wins over the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if real_ip := request.headers.get("x-real-ip"):
        return real_ip
    return request.client.host if request.client else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id, logs it and reports how long it took.

    The id comes from the incoming ``X-Request-ID`` header when present and is
    echoed on the response together with ``X-Response-Time``.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: Sequence[str] = ("/health",),
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths)

    def _is_logged(self, path: str) -> bool:
        return self.log_requests and not path.startswith(self.exclude_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        log = logger.bind(method=request.method, path=request.url.path)
        logged = self._is_logged(request.url.path)
        started = time.perf_counter()

        if logged:
            log.info(
                "request_started",
                client_ip=client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception(
                "request_failed",
                error_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            clear_request_context()
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        if logged:
            emit = log.warning if response.status_code >= 400 else log.info
            emit(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = f"{duration_ms:.2f}ms"
        clear_request_context()
        return response
