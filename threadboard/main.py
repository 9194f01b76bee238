"""Threadboard API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from threadboard.auth.router import router as auth_router
from threadboard.auth.service import AuthService
from threadboard.comments.router import router as comments_router
from threadboard.comments.service import CommentService
from threadboard.config import get_settings
from threadboard.core.context import current_request_id
from threadboard.core.logging import configure_structlog
from threadboard.core.middleware import (
    REQUEST_ID_HEADER,
    RESPONSE_TIME_HEADER,
    RequestContextMiddleware,
)
from threadboard.health import router as health_router
from threadboard.notifications.router import router as notifications_router
from threadboard.notifications.service import NotificationService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=settings.log_dir)

logger = structlog.get_logger(__name__)


def init_services(app: FastAPI, session: Any) -> None:
    """Build the services over a Cassandra session and attach them to app.state."""
    settings = get_settings()
    keyspace = settings.cassandra_keyspace

    notification_service = NotificationService(session=session, keyspace=keyspace)

    app.state.cassandra_session = session
    app.state.auth_service = AuthService(session=session, keyspace=keyspace)
    app.state.notification_service = notification_service
    app.state.comment_service = CommentService(
        session=session,
        keyspace=keyspace,
        notification_service=notification_service,
        max_content_length=settings.comment_max_length,
    )
    logger.info("services_initialized", keyspace=keyspace)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Imported here so the app can be built without a Cassandra driver loaded
    from threadboard.core.database import (  # noqa: PLC0415
        init_async_cassandra,
        shutdown_async_cassandra,
    )

    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    session = await init_async_cassandra()
    logger.info("cassandra_initialized")
    init_services(app, session)

    yield

    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def _error_content(
    status_code: int,
    message: str,
    request_id: str | None,
    code: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    content: dict[str, Any] = {
        "error": True,
        "message": message,
        "code": code,
        "status_code": status_code,
        "request_id": request_id,
    }
    content.update(extra)
    return content


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Starlette's debug page would expose stack traces; the handlers below log
    # full details and return safe messages instead.
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Threaded comment board API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, RESPONSE_TIME_HEADER],
        max_age=settings.cors_max_age,
    )

    # The last middleware added runs outermost, so request ids also cover
    # responses CORS answers on its own (preflights)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return current_request_id()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Render HTTP errors as {error, message, code, status_code, request_id}.

        Domain errors put a {"message", "code"} dict in the detail.
        """
        request_id = _get_request_id_safe(request)

        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        extra: dict[str, Any] = {}
        if isinstance(exc.detail, dict):
            message = str(exc.detail.get("message", ""))
            code = exc.detail.get("code")
            extra = {
                k: v for k, v in exc.detail.items() if k not in ("message", "code")
            }
        else:
            message = str(exc.detail)
            code = None

        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            message = "Internal server error"

        return ORJSONResponse(
            status_code=exc.status_code,
            content=_error_content(exc.status_code, message, request_id, code, **extra),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Return malformed input as 400 with per-field details."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "validation_error",
            errors=str(exc.errors()),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_content(
                status.HTTP_400_BAD_REQUEST,
                "Validation error",
                request_id,
                "validation_error",
                details=[
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        Never exposes stack traces; details are logged internally.
        """
        request_id = _get_request_id_safe(request)

        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        message = "An unexpected error occurred. Please try again later."
        if settings.debug:
            message = f"{type(exc).__name__}: {exc}"

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_content(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                message,
                request_id,
                "internal_error",
            ),
        )

    app.include_router(health_router)
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(comments_router, prefix=settings.api_prefix)
    app.include_router(notifications_router, prefix=settings.api_prefix)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Threadboard API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "threadboard.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload and settings.is_development,
    )
