"""Health check endpoints."""

from threadboard.health.router import router


__all__ = ["router"]
