"""Tests for RequestContextMiddleware, alone and inside the app."""

from collections.abc import Callable
from typing import Any
from uuid import UUID, uuid4

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from threadboard.auth.dependencies import CurrentUser
from threadboard.core.middleware import RequestContextMiddleware, client_ip


@pytest.fixture
def context_app() -> FastAPI:
    """Minimal app exposing the log context seen by its endpoints."""
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware, exclude_paths=())

    @app.get("/context")
    async def context() -> dict[str, Any]:
        return structlog.contextvars.get_contextvars()

    @app.get("/whoami")
    async def whoami(user: CurrentUser) -> dict[str, Any]:
        return structlog.contextvars.get_contextvars()

    return app


class TestRequestId:
    def test_supplied_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/health/live", headers={"X-Request-ID": "trace-abc"})

        assert response.headers["X-Request-ID"] == "trace-abc"
        assert response.headers["X-Response-Time"].endswith("ms")

    def test_generated_id_is_uuid(self, client: TestClient) -> None:
        response = client.get("/health/live")

        assert UUID(response.headers["X-Request-ID"])

    def test_error_body_matches_header(self, client: TestClient) -> None:
        response = client.get(
            f"/api/v1/comments/{uuid4()}", headers={"X-Request-ID": "trace-404"}
        )

        assert response.status_code == 404
        assert response.json()["request_id"] == "trace-404"
        assert response.headers["X-Request-ID"] == "trace-404"

    def test_cors_preflight_carries_request_id(self, client: TestClient) -> None:
        response = client.options(
            "/api/v1/comments",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "X-Request-ID": "trace-preflight",
            },
        )

        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == "trace-preflight"


class TestLogContext:
    def test_request_id_bound_for_handlers(self, context_app: FastAPI) -> None:
        response = TestClient(context_app).get(
            "/context", headers={"X-Request-ID": "trace-1"}
        )

        assert response.json() == {"request_id": "trace-1"}

    def test_authenticated_user_bound(
        self,
        context_app: FastAPI,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        user_id = uuid4()

        response = TestClient(context_app).get("/whoami", headers=auth_headers(user_id))

        assert response.json()["user_id"] == str(user_id)
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    def test_no_leak_between_requests(
        self,
        context_app: FastAPI,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        client = TestClient(context_app)
        client.get("/whoami", headers=auth_headers(uuid4()))

        response = client.get("/context")

        assert "user_id" not in response.json()


class TestClientIp:
    def test_forwarded_for_first_hop(self) -> None:
        request = Request(
            {
                "type": "http",
                "headers": [(b"x-forwarded-for", b"203.0.113.7, 10.0.0.1")],
                "client": ("10.0.0.1", 1234),
            }
        )

        assert client_ip(request) == "203.0.113.7"

    def test_falls_back_to_peer(self) -> None:
        request = Request({"type": "http", "headers": [], "client": ("10.0.0.2", 80)})

        assert client_ip(request) == "10.0.0.2"
