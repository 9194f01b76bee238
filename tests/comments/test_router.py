"""Tests for /api/v1/comments endpoints."""

from collections.abc import Callable
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FrozenClock


Headers = Callable[..., dict[str, str]]


@pytest.fixture
def alice_id() -> UUID:
    return uuid4()


@pytest.fixture
def alice(auth_headers: Headers, alice_id: UUID) -> dict[str, str]:
    return auth_headers(alice_id, "alice")


@pytest.fixture
def bob(auth_headers: Headers) -> dict[str, str]:
    return auth_headers(uuid4(), "bob")


def _post(client: TestClient, headers: dict[str, str], **body: object) -> dict:
    response = client.post("/api/v1/comments", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestReadEndpoints:
    def test_list_is_public(self, client: TestClient) -> None:
        response = client.get("/api/v1/comments")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_returns_tree(
        self,
        client: TestClient,
        clock: FrozenClock,
        alice: dict[str, str],
        bob: dict[str, str],
    ) -> None:
        root = _post(client, alice, content="root")
        clock.advance(seconds=1)
        reply = _post(client, bob, content="reply", parentId=root["id"])

        data = client.get("/api/v1/comments").json()

        assert len(data) == 1
        assert data[0]["id"] == root["id"]
        assert data[0]["children"][0]["id"] == reply["id"]
        assert data[0]["children"][0]["parentId"] == root["id"]

    def test_get_is_public(self, client: TestClient, alice: dict[str, str]) -> None:
        created = _post(client, alice, content="hello")

        response = client.get(f"/api/v1/comments/{created['id']}")

        assert response.status_code == 200
        assert response.json()["content"] == "hello"

    def test_get_missing(self, client: TestClient) -> None:
        response = client.get(f"/api/v1/comments/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "comment_not_found"

    def test_get_malformed_id(self, client: TestClient) -> None:
        response = client.get("/api/v1/comments/not-a-uuid")
        assert response.status_code == 400


class TestCreate:
    def test_response_shape(
        self, client: TestClient, alice: dict[str, str], alice_id: UUID
    ) -> None:
        data = _post(client, alice, content="hello")

        assert data["authorId"] == str(alice_id)
        assert data["author"] == {"id": str(alice_id), "username": "alice"}
        assert data["parentId"] is None
        assert data["isDeleted"] is False
        assert data["canEdit"] is True
        assert data["canDelete"] is True
        assert data["canUndoDelete"] is False
        assert data["children"] == []
        assert "createdAt" in data
        assert "updatedAt" in data

    def test_requires_auth(self, client: TestClient) -> None:
        response = client.post("/api/v1/comments", json={"content": "hi"})
        assert response.status_code == 401

    def test_unknown_parent(self, client: TestClient, alice: dict[str, str]) -> None:
        response = client.post(
            "/api/v1/comments",
            json={"content": "hi", "parentId": str(uuid4())},
            headers=alice,
        )

        assert response.status_code == 404
        assert response.json()["code"] == "parent_not_found"

    @pytest.mark.parametrize("body", [{}, {"content": "   "}, {"content": 5}])
    def test_invalid_body(
        self, client: TestClient, alice: dict[str, str], body: dict
    ) -> None:
        response = client.post("/api/v1/comments", json=body, headers=alice)

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_too_long(self, client: TestClient, alice: dict[str, str]) -> None:
        response = client.post(
            "/api/v1/comments", json={"content": "x" * 1001}, headers=alice
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_content"

    def test_padding_counts_toward_limit(
        self, client: TestClient, alice: dict[str, str]
    ) -> None:
        padded = "  " + "x" * 999

        response = client.post(
            "/api/v1/comments", json={"content": padded}, headers=alice
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_content"

    def test_content_stored_as_sent(
        self, client: TestClient, alice: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="  indented\n")

        fetched = client.get(f"/api/v1/comments/{created['id']}").json()

        assert created["content"] == "  indented\n"
        assert fetched["content"] == "  indented\n"


class TestUpdate:
    def test_update(self, client: TestClient, alice: dict[str, str]) -> None:
        created = _post(client, alice, content="v1")

        response = client.put(
            f"/api/v1/comments/{created['id']}", json={"content": "v2"}, headers=alice
        )

        assert response.status_code == 200
        assert response.json()["content"] == "v2"

    def test_not_author(
        self, client: TestClient, alice: dict[str, str], bob: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="v1")

        response = client.put(
            f"/api/v1/comments/{created['id']}", json={"content": "v2"}, headers=bob
        )

        assert response.status_code == 403
        assert response.json()["code"] == "not_comment_author"

    def test_window_expired(
        self, client: TestClient, clock: FrozenClock, alice: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="v1")
        clock.advance(minutes=16)

        response = client.put(
            f"/api/v1/comments/{created['id']}", json={"content": "v2"}, headers=alice
        )

        assert response.status_code == 403
        assert response.json()["code"] == "edit_window_expired"

    def test_missing(self, client: TestClient, alice: dict[str, str]) -> None:
        response = client.put(
            f"/api/v1/comments/{uuid4()}", json={"content": "v2"}, headers=alice
        )
        assert response.status_code == 404


class TestDeleteAndUndo:
    def test_delete_returns_empty_ok(
        self, client: TestClient, alice: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="bye")

        response = client.delete(f"/api/v1/comments/{created['id']}", headers=alice)

        assert response.status_code == 200
        assert response.content == b""
        fetched = client.get(f"/api/v1/comments/{created['id']}").json()
        assert fetched["isDeleted"] is True
        assert fetched["deletedAt"] is not None
        assert fetched["canUndoDelete"] is True

    def test_delete_requires_auth(
        self, client: TestClient, alice: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="bye")

        response = client.delete(f"/api/v1/comments/{created['id']}")

        assert response.status_code == 401

    def test_delete_window_expired(
        self, client: TestClient, clock: FrozenClock, alice: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="bye")
        clock.advance(minutes=15, milliseconds=1)

        response = client.delete(f"/api/v1/comments/{created['id']}", headers=alice)

        assert response.status_code == 403
        assert response.json()["code"] == "delete_window_expired"

    def test_repeat_delete_after_window(
        self, client: TestClient, clock: FrozenClock, alice: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="bye")
        url = f"/api/v1/comments/{created['id']}"
        clock.advance(minutes=10)
        assert client.delete(url, headers=alice).status_code == 200

        clock.advance(minutes=20)
        response = client.delete(url, headers=alice)

        assert response.status_code == 403
        assert response.json()["code"] == "delete_window_expired"

    def test_undo(self, client: TestClient, alice: dict[str, str]) -> None:
        created = _post(client, alice, content="back")
        client.delete(f"/api/v1/comments/{created['id']}", headers=alice)

        response = client.post(
            f"/api/v1/comments/{created['id']}/undo-delete", headers=alice
        )

        assert response.status_code == 200
        data = response.json()
        assert data["isDeleted"] is False
        assert data["deletedAt"] is None
        assert data["content"] == "back"

    def test_undo_expired(
        self, client: TestClient, clock: FrozenClock, alice: dict[str, str]
    ) -> None:
        created = _post(client, alice, content="gone")
        client.delete(f"/api/v1/comments/{created['id']}", headers=alice)
        clock.advance(minutes=16)

        response = client.post(
            f"/api/v1/comments/{created['id']}/undo-delete", headers=alice
        )

        assert response.status_code == 403
        assert response.json()["code"] == "undo_window_expired"

    def test_undo_not_deleted(self, client: TestClient, alice: dict[str, str]) -> None:
        created = _post(client, alice, content="here")

        response = client.post(
            f"/api/v1/comments/{created['id']}/undo-delete", headers=alice
        )

        assert response.status_code == 403
        assert response.json()["code"] == "comment_not_deleted"
