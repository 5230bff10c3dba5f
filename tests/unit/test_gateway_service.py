"""Unit tests for AuthService (mocked provider, in-memory usuarios)."""

import uuid
from unittest.mock import AsyncMock

import pytest

from src.lt_common.enums import Role
from src.lt_common.errors import (
    AuthenticationError,
    EmailExistsError,
    IdentityProviderError,
    InvalidCredentialsError,
    UserInactiveError,
    UserNotFoundError,
)
from src.lt_gateway.auth.provider_client import ProviderSession
from src.lt_gateway.user.schemas import RegisterRequest
from src.lt_gateway.user.service import AuthService


def _session(user_id: str) -> ProviderSession:
    return ProviderSession(
        access_token="at",
        refresh_token="rt",
        token_type="bearer",
        expires_in=3600,
        user_id=user_id,
        email="a@example.com",
    )


@pytest.fixture
def provider() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(provider: AsyncMock, users) -> AuthService:
    return AuthService(provider=provider, users=users)


class TestRegister:
    async def test_creates_provider_then_local_user(
        self, service: AuthService, provider: AsyncMock, users, db
    ) -> None:
        new_id = str(uuid.uuid4())
        provider.create_user.return_value = new_id
        body = RegisterRequest(
            email="ana@example.com", password="secret1", nombre="Ana", rol=Role.SUPERVISOR
        )

        user = await service.register(db, body)

        provider.create_user.assert_awaited_once_with("ana@example.com", "secret1", "Ana")
        assert str(user.id) == new_id
        assert user.rol == "supervisor"
        assert user.estado == "activo"
        assert new_id in users.rows

    async def test_default_rol_is_operador(
        self, service: AuthService, provider: AsyncMock, db
    ) -> None:
        provider.create_user.return_value = str(uuid.uuid4())
        body = RegisterRequest(email="op@example.com", password="secret1", nombre="Op")
        user = await service.register(db, body)
        assert user.rol == "operador"

    async def test_local_failure_deletes_provider_user(
        self, provider: AsyncMock, db
    ) -> None:
        new_id = str(uuid.uuid4())
        provider.create_user.return_value = new_id
        users = AsyncMock()
        users.create.side_effect = EmailExistsError()
        service = AuthService(provider=provider, users=users)

        with pytest.raises(EmailExistsError):
            await service.register(
                db, RegisterRequest(email="a@example.com", password="secret1", nombre="Ana")
            )
        provider.delete_user.assert_awaited_once_with(new_id)

    async def test_failed_provider_cleanup_keeps_original_error(
        self, provider: AsyncMock, db
    ) -> None:
        provider.create_user.return_value = str(uuid.uuid4())
        provider.delete_user.side_effect = IdentityProviderError("provider unavailable")
        users = AsyncMock()
        users.create.side_effect = EmailExistsError()
        service = AuthService(provider=provider, users=users)

        with pytest.raises(EmailExistsError):
            await service.register(
                db, RegisterRequest(email="a@example.com", password="secret1", nombre="Ana")
            )
        provider.delete_user.assert_awaited_once()

    async def test_provider_duplicate_skips_local_insert(
        self, service: AuthService, provider: AsyncMock, users, db
    ) -> None:
        provider.create_user.side_effect = EmailExistsError()
        with pytest.raises(EmailExistsError):
            await service.register(
                db, RegisterRequest(email="a@example.com", password="secret1", nombre="Ana")
            )
        assert users.rows == {}


class TestLogin:
    async def test_success(self, service: AuthService, provider: AsyncMock, users, db) -> None:
        user = users.add(rol="admin")
        provider.sign_in_with_password.return_value = _session(str(user.id))

        found, session = await service.login(db, user.email, "secret1")

        assert found is user
        assert session.access_token == "at"

    async def test_bad_credentials_propagate(
        self, service: AuthService, provider: AsyncMock, db
    ) -> None:
        provider.sign_in_with_password.side_effect = InvalidCredentialsError()
        with pytest.raises(InvalidCredentialsError):
            await service.login(db, "a@example.com", "wrong-pass")

    async def test_no_local_profile(self, service: AuthService, provider: AsyncMock, db) -> None:
        provider.sign_in_with_password.return_value = _session(str(uuid.uuid4()))
        with pytest.raises(AuthenticationError):
            await service.login(db, "a@example.com", "secret1")

    async def test_inactive_user(
        self, service: AuthService, provider: AsyncMock, users, db
    ) -> None:
        user = users.add(estado="inactivo")
        provider.sign_in_with_password.return_value = _session(str(user.id))
        with pytest.raises(UserInactiveError):
            await service.login(db, user.email, "secret1")


class TestProfileAndLogout:
    async def test_profile_missing(self, service: AuthService, db) -> None:
        with pytest.raises(UserNotFoundError):
            await service.get_profile(db, str(uuid.uuid4()))

    async def test_logout_revokes_provider_session(
        self, service: AuthService, provider: AsyncMock
    ) -> None:
        await service.logout("token-123")
        provider.sign_out.assert_awaited_once_with("token-123")
