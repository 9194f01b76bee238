"""Health check endpoints."""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import ORJSONResponse

from threadboard.config import get_settings


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


async def check_cassandra(request: Request) -> bool:
    """Return True when the Cassandra session answers a trivial query."""
    session = getattr(request.app.state, "cassandra_session", None)
    if session is None:
        return False
    try:
        await session.aexecute("SELECT now() FROM system.local")
    except Exception as e:
        logger.warning("cassandra_health_check_failed", error=str(e))
        return False
    return True


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness check - confirms if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> ORJSONResponse:
    """Readiness check - 503 until the database is reachable."""
    settings = get_settings()
    cassandra_ok = await check_cassandra(request)
    return ORJSONResponse(
        status_code=status.HTTP_200_OK
        if cassandra_ok
        else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if cassandra_ok else "not_ready",
            "environment": settings.environment,
            "checks": {"cassandra": cassandra_ok},
        },
    )


@router.get("")
async def health(request: Request) -> dict[str, object]:
    """General health check endpoint."""
    settings = get_settings()
    cassandra_ok = await check_cassandra(request)
    return {
        "status": "healthy" if cassandra_ok else "degraded",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
        "checks": {"cassandra": cassandra_ok},
    }
