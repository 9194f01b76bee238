"""Tests for request-scoped log context."""

from collections.abc import Iterator
from uuid import UUID, uuid4

import pytest
import structlog

from threadboard.core.context import (
    bind_request_id,
    bind_resource,
    bind_user,
    clear_request_context,
    current_request_id,
)


@pytest.fixture(autouse=True)
def _clean_context() -> Iterator[None]:
    clear_request_context()
    yield
    clear_request_context()


class TestBindRequestId:
    def test_keeps_supplied_id(self) -> None:
        assert bind_request_id("trace-1") == "trace-1"
        assert current_request_id() == "trace-1"
        assert structlog.contextvars.get_contextvars() == {"request_id": "trace-1"}

    def test_generates_uuid_when_missing(self) -> None:
        request_id = bind_request_id()

        assert UUID(request_id)
        assert current_request_id() == request_id

    def test_drops_bindings_from_previous_request(self) -> None:
        bind_user(uuid4())

        bind_request_id("next")

        assert "user_id" not in structlog.contextvars.get_contextvars()


class TestBindings:
    def test_user_and_resource_ids_are_strings(self) -> None:
        user_id, comment_id = uuid4(), uuid4()
        bind_request_id("trace-2")

        bind_user(user_id)
        bind_resource(comment_id=comment_id)

        assert structlog.contextvars.get_contextvars() == {
            "request_id": "trace-2",
            "user_id": str(user_id),
            "comment_id": str(comment_id),
        }

    def test_clear_removes_everything(self) -> None:
        bind_request_id("trace-3")
        bind_user(uuid4())

        clear_request_context()

        assert current_request_id() is None
        assert structlog.contextvars.get_contextvars() == {}
