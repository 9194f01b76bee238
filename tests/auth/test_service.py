"""Tests for AuthService against the in-memory session."""

import pytest

from threadboard.auth.schemas import RegisterRequest
from threadboard.auth.security import decode_access_token
from threadboard.auth.service import (
    AuthService,
    InvalidCredentialsError,
    UserExistsError,
)


def _register_request(
    username: str = "alice", email: str = "alice@example.com"
) -> RegisterRequest:
    return RegisterRequest(username=username, email=email, password="secret123")


class TestRegisterUser:
    @pytest.mark.asyncio
    async def test_register_persists_user(self, auth_service: AuthService) -> None:
        user = await auth_service.register_user(_register_request())

        stored = await auth_service.get_user_by_id(user.id)
        assert stored is not None
        assert stored.username == "alice"
        assert stored.email == "alice@example.com"
        assert stored.password_hash != "secret123"
        assert stored.is_verified is False

    @pytest.mark.asyncio
    async def test_duplicate_email(self, auth_service: AuthService) -> None:
        await auth_service.register_user(_register_request())

        with pytest.raises(UserExistsError) as exc_info:
            await auth_service.register_user(_register_request(username="alice2"))

        assert exc_info.value.code == "email_exists"
        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, auth_service: AuthService) -> None:
        await auth_service.register_user(_register_request())

        with pytest.raises(UserExistsError) as exc_info:
            await auth_service.register_user(
                _register_request(email="other@example.com")
            )

        assert exc_info.value.code == "username_exists"


class TestAuthenticateUser:
    @pytest.mark.asyncio
    async def test_valid_credentials(self, auth_service: AuthService) -> None:
        registered = await auth_service.register_user(_register_request())

        user = await auth_service.authenticate_user("alice@example.com", "secret123")

        assert user.id == registered.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service: AuthService) -> None:
        await auth_service.register_user(_register_request())

        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate_user("alice@example.com", "wrong1234")

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service: AuthService) -> None:
        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate_user("ghost@example.com", "secret123")


class TestTokens:
    @pytest.mark.asyncio
    async def test_auth_response_token_identifies_user(
        self, auth_service: AuthService
    ) -> None:
        user = await auth_service.register_user(_register_request())

        response = auth_service.build_auth_response(user)
        payload = decode_access_token(response.access_token)

        assert response.token_type == "bearer"
        assert response.user.id == user.id
        assert payload["sub"] == str(user.id)
        assert payload["username"] == "alice"
