"""Tests for token verification and IdentityResolver."""

import pytest
from jose import jwt

from config.settings import settings
from src.lt_common.enums import EstadoUsuario, Role
from src.lt_common.errors import AuthenticationError, UserInactiveError
from src.lt_gateway.auth.identity import IdentityResolver, parse_bearer
from src.lt_gateway.auth.jwt_handler import decode_access_token


class TestParseBearer:
    def test_extracts_token(self) -> None:
        assert parse_bearer("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [None, "", "Basic xyz", "Bearer ", "bearer abc"])
    def test_rejects_malformed(self, header: str | None) -> None:
        with pytest.raises(AuthenticationError, match="Token requerido"):
            parse_bearer(header)


class TestDecodeAccessToken:
    def test_valid(self, make_token) -> None:
        payload = decode_access_token(make_token("user-1"))
        assert payload["sub"] == "user-1"

    def test_expired(self, make_token) -> None:
        with pytest.raises(AuthenticationError, match="Token inválido"):
            decode_access_token(make_token("user-1", expires_in=-60))

    def test_wrong_audience(self, make_token) -> None:
        with pytest.raises(AuthenticationError):
            decode_access_token(make_token("user-1", aud="anon"))

    def test_wrong_secret(self) -> None:
        token = jwt.encode(
            {"sub": "user-1", "aud": settings.JWT_AUDIENCE}, "another-secret", algorithm="HS256"
        )
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_garbage(self) -> None:
        with pytest.raises(AuthenticationError):
            decode_access_token("not-a-jwt")


class TestIdentityResolver:
    async def test_resolves_principal(self, users, db, make_token) -> None:
        user = users.add(rol="supervisor")
        resolver = IdentityResolver(users=users)

        principal = await resolver.resolve(f"Bearer {make_token(str(user.id))}", db)

        assert principal.id == str(user.id)
        assert principal.role is Role.SUPERVISOR
        assert principal.estado is EstadoUsuario.ACTIVO
        assert principal.email == user.email

    async def test_missing_header(self, users, db) -> None:
        with pytest.raises(AuthenticationError, match="Token requerido"):
            await IdentityResolver(users=users).resolve(None, db)

    async def test_unknown_subject(self, users, db, make_token) -> None:
        with pytest.raises(AuthenticationError, match="Usuario no encontrado"):
            await IdentityResolver(users=users).resolve(
                f"Bearer {make_token('00000000-0000-0000-0000-000000000000')}", db
            )

    async def test_inactive_user(self, users, db, make_token) -> None:
        user = users.add(estado="inactivo")
        with pytest.raises(UserInactiveError) as exc_info:
            await IdentityResolver(users=users).resolve(
                f"Bearer {make_token(str(user.id))}", db
            )
        assert exc_info.value.http_status == 401

    async def test_unknown_rol_rejected(self, users, db, make_token) -> None:
        user = users.add(rol="cajero")
        with pytest.raises(AuthenticationError):
            await IdentityResolver(users=users).resolve(
                f"Bearer {make_token(str(user.id))}", db
            )

    async def test_custom_provider(self, users, db) -> None:
        user = users.add(rol="operador")

        class StaticProvider:
            async def verify(self, token: str) -> str:
                assert token == "opaque"
                return str(user.id)

        principal = await IdentityResolver(StaticProvider(), users).resolve("Bearer opaque", db)
        assert principal.role is Role.OPERADOR
