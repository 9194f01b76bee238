"""Shared fixtures: in-memory Cassandra session, services and an app client."""

import os
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("ENVIRONMENT", "testing")

from threadboard.auth.security import create_access_token  # noqa: E402
from threadboard.auth.service import AuthService  # noqa: E402
from threadboard.comments.service import CommentService  # noqa: E402
from threadboard.main import create_app  # noqa: E402
from threadboard.notifications.service import NotificationService  # noqa: E402
from tests.fakes import KEYSPACE, FakeCassandraSession, FrozenClock  # noqa: E402


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def fake_session() -> FakeCassandraSession:
    return FakeCassandraSession()


@pytest.fixture
def notification_service(fake_session: FakeCassandraSession) -> NotificationService:
    return NotificationService(session=fake_session, keyspace=KEYSPACE)


@pytest.fixture
def comment_service(
    fake_session: FakeCassandraSession,
    notification_service: NotificationService,
    clock: FrozenClock,
) -> CommentService:
    return CommentService(
        session=fake_session,
        keyspace=KEYSPACE,
        notification_service=notification_service,
        clock=clock,
    )


@pytest.fixture
def auth_service(fake_session: FakeCassandraSession) -> AuthService:
    return AuthService(session=fake_session, keyspace=KEYSPACE)


@pytest.fixture
def app(
    fake_session: FakeCassandraSession,
    auth_service: AuthService,
    notification_service: NotificationService,
    comment_service: CommentService,
) -> FastAPI:
    """App with services wired to the in-memory session; lifespan is not run."""
    application = create_app()
    application.state.cassandra_session = fake_session
    application.state.auth_service = auth_service
    application.state.notification_service = notification_service
    application.state.comment_service = comment_service
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Factory for Authorization headers of an arbitrary user."""

    def _headers(user_id: UUID | None = None, username: str = "alice") -> dict[str, str]:
        token = create_access_token(
            {
                "sub": str(user_id or uuid4()),
                "username": username,
                "email": f"{username}@example.com",
            }
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
