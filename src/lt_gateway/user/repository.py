"""UserRepository — ORM access to the usuarios table."""

import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.db_errors import raise_for_integrity
from src.lt_common.errors import EmailExistsError
from src.lt_gateway.user.db_models import UserModel


class UserRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, user_id: str) -> UserModel | None: ...

    async def create(self, db: AsyncSession, user: UserModel) -> UserModel: ...


class UserRepository:
    async def get_by_id(self, db: AsyncSession, user_id: str) -> UserModel | None:
        try:
            key = uuid.UUID(user_id)
        except ValueError:
            return None
        result = await db.execute(select(UserModel).where(UserModel.id == key))
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, user: UserModel) -> UserModel:
        db.add(user)
        try:
            await db.flush()  # surfaces the UNIQUE(email) violation inside the caller's tx
        except IntegrityError as exc:
            raise_for_integrity(exc, on_conflict=EmailExistsError())
        await db.refresh(user)
        return user
