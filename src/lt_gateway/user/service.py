"""User domain service: register, login, profile, logout.

Credentials live in the identity provider; the local usuarios row carries
rol and estado. Transactions are managed by the caller (router layer) via
`async with db.begin()`.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.enums import EstadoUsuario
from src.lt_common.errors import (
    AppError,
    AuthenticationError,
    UserInactiveError,
    UserNotFoundError,
)
from src.lt_gateway.auth.provider_client import ProviderSession, SupabaseAuthClient
from src.lt_gateway.user.db_models import UserModel
from src.lt_gateway.user.repository import UserRepository, UserRepositoryProtocol
from src.lt_gateway.user.schemas import RegisterRequest

logger = logging.getLogger(__name__)


class AuthService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(
        self,
        provider: SupabaseAuthClient | None = None,
        users: UserRepositoryProtocol | None = None,
    ) -> None:
        self._provider = provider or SupabaseAuthClient()
        self._users: UserRepositoryProtocol = users or UserRepository()

    async def register(self, db: AsyncSession, body: RegisterRequest) -> UserModel:
        """Create the provider user, then the local usuarios row.

        If the local insert fails the provider user is deleted again so the
        two stores do not drift apart.
        """
        user_id = await self._provider.create_user(body.email, body.password, body.nombre)
        user = UserModel(
            id=uuid.UUID(user_id),
            email=body.email,
            nombre=body.nombre,
            rol=body.rol.value,
            estado=EstadoUsuario.ACTIVO.value,
        )
        try:
            created = await self._users.create(db, user)
        except Exception:
            logger.error("local usuarios insert failed, rolling back provider user %s", user_id)
            try:
                await self._provider.delete_user(user_id)
            except AppError as cleanup_exc:
                logger.error(
                    "could not delete provider user %s: %s", user_id, cleanup_exc.message
                )
            raise

        logger.info("user registered id=%s rol=%s", user_id, body.rol.value)
        return created

    async def login(
        self, db: AsyncSession, email: str, password: str
    ) -> tuple[UserModel, ProviderSession]:
        session = await self._provider.sign_in_with_password(email, password)

        user = await self._users.get_by_id(db, session.user_id)
        if user is None:
            raise AuthenticationError("Usuario no encontrado en el sistema")
        if user.estado == EstadoUsuario.INACTIVO.value:
            raise UserInactiveError()

        logger.info("user logged in id=%s", session.user_id)
        return user, session

    async def get_profile(self, db: AsyncSession, user_id: str) -> UserModel:
        user = await self._users.get_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def logout(self, access_token: str) -> None:
        await self._provider.sign_out(access_token)
        logger.info("user logged out")
