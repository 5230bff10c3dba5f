# src/lt_banca/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.domain.models import Banca


class BancaRepositoryProtocol(Protocol):
    async def get_by_id(
        self,
        db: AsyncSession,
        banca_id: str,
        lock: bool = False,
    ) -> Banca | None:
        """``lock=True`` takes a shared row lock until the transaction ends."""
        ...

    async def list_bancas(
        self,
        db: AsyncSession,
        estado: str | None,
        limit: int,
        offset: int,
    ) -> list[Banca]: ...

    async def count_bancas(self, db: AsyncSession, estado: str | None) -> int: ...

    async def create(
        self,
        db: AsyncSession,
        nombre: str,
        ubicacion: str | None,
        ip_whitelist: list[str],
    ) -> Banca: ...

    async def update(
        self,
        db: AsyncSession,
        banca_id: str,
        fields: dict[str, Any],
    ) -> Banca | None: ...
