# src/lt_vendedor/domain/repository.py
"""VendedorRepository Protocol — vendedores plus the bancas_vendedores relation."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.domain.models import Banca
from src.lt_vendedor.domain.models import Vendedor


class VendedorRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, vendedor_id: str) -> Vendedor | None: ...

    async def list_vendedores(
        self,
        db: AsyncSession,
        estado: str | None,
        limit: int,
        offset: int,
    ) -> list[Vendedor]: ...

    async def count_vendedores(self, db: AsyncSession, estado: str | None) -> int: ...

    async def create(
        self,
        db: AsyncSession,
        nombre: str,
        cedula: str,
        telefono: str | None,
    ) -> Vendedor: ...

    async def update(
        self,
        db: AsyncSession,
        vendedor_id: str,
        fields: dict[str, Any],
    ) -> Vendedor | None: ...

    async def is_assigned(self, db: AsyncSession, vendedor_id: str, banca_id: str) -> bool: ...

    async def replace_assignments(
        self,
        db: AsyncSession,
        vendedor_id: str,
        banca_ids: list[str],
    ) -> None: ...

    async def list_assigned_bancas(self, db: AsyncSession, vendedor_id: str) -> list[Banca]: ...

    async def remove_assignment(
        self,
        db: AsyncSession,
        vendedor_id: str,
        banca_id: str,
    ) -> bool: ...
