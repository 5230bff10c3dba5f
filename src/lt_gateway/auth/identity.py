"""Identity resolution: bearer credential -> Principal.

Steps, each failing with AuthenticationError (401):
  1. header present and shaped ``Bearer <token>``
  2. provider accepts the token and yields a subject
  3. a local usuarios row exists for that subject
  4. that row is not ``inactivo``
"""

import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.enums import EstadoUsuario, Role
from src.lt_common.errors import AuthenticationError, UserInactiveError
from src.lt_gateway.auth.jwt_handler import decode_access_token
from src.lt_gateway.auth.principal import Principal
from src.lt_gateway.user.repository import UserRepository, UserRepositoryProtocol

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


class IdentityProviderProtocol(Protocol):
    async def verify(self, token: str) -> str:
        """Return the subject id, or raise AuthenticationError."""
        ...


class SupabaseTokenVerifier:
    """Verifies Supabase access tokens locally with the project JWT secret."""

    async def verify(self, token: str) -> str:
        payload = decode_access_token(token)
        return str(payload["sub"])


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an Authorization header value."""
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise AuthenticationError("Token requerido")
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Token requerido")
    return token


class IdentityResolver:
    def __init__(
        self,
        provider: IdentityProviderProtocol | None = None,
        users: UserRepositoryProtocol | None = None,
    ) -> None:
        self._provider: IdentityProviderProtocol = provider or SupabaseTokenVerifier()
        self._users: UserRepositoryProtocol = users or UserRepository()

    async def resolve(self, authorization: str | None, db: AsyncSession) -> Principal:
        token = parse_bearer(authorization)
        subject = await self._provider.verify(token)

        user = await self._users.get_by_id(db, subject)
        if user is None:
            raise AuthenticationError("Usuario no encontrado")
        if user.estado == EstadoUsuario.INACTIVO.value:
            raise UserInactiveError()

        try:
            role = Role(user.rol)
        except ValueError:
            logger.warning("usuario %s has unknown rol %r", subject, user.rol)
            raise AuthenticationError("Usuario no encontrado") from None

        principal = Principal(
            id=str(user.id),
            email=user.email,
            role=role,
            estado=EstadoUsuario(user.estado),
        )
        logger.info("authenticated user=%s role=%s", principal.id, principal.role.value)
        return principal
