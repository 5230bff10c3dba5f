"""VendedorApplicationService — vendedores CRUD plus banca assignments.

Write methods expect the caller (router) to hold ``async with db.begin()``.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.application.schemas import BancaOut
from src.lt_banca.domain.repository import BancaRepositoryProtocol
from src.lt_banca.infrastructure.persistence import BancaRepository
from src.lt_common.enums import EstadoVendedor
from src.lt_common.errors import AppError, ValidationError, VendedorNotFoundError
from src.lt_common.pagination import Pagination, PaginationMeta, build_meta
from src.lt_vendedor.application.schemas import (
    CreateVendedorRequest,
    UpdateVendedorRequest,
    VendedorOut,
)
from src.lt_vendedor.domain.repository import VendedorRepositoryProtocol
from src.lt_vendedor.infrastructure.persistence import VendedorRepository

logger = logging.getLogger(__name__)


class VendedorApplicationService:
    def __init__(
        self,
        repo: VendedorRepositoryProtocol | None = None,
        bancas: BancaRepositoryProtocol | None = None,
    ) -> None:
        self._repo: VendedorRepositoryProtocol = repo or VendedorRepository()
        self._bancas: BancaRepositoryProtocol = bancas or BancaRepository()

    async def list_vendedores(
        self,
        db: AsyncSession,
        pagination: Pagination,
        estado: EstadoVendedor | None,
    ) -> tuple[list[VendedorOut], PaginationMeta]:
        estado_value = estado.value if estado else None
        total = await self._repo.count_vendedores(db, estado_value)
        vendedores = await self._repo.list_vendedores(
            db, estado_value, pagination.limit, pagination.offset
        )
        return [VendedorOut.from_domain(v) for v in vendedores], build_meta(pagination, total)

    async def get_vendedor(self, db: AsyncSession, vendedor_id: str) -> VendedorOut:
        vendedor = await self._repo.get_by_id(db, vendedor_id)
        if vendedor is None:
            raise VendedorNotFoundError(vendedor_id)
        return VendedorOut.from_domain(vendedor)

    async def create_vendedor(
        self, db: AsyncSession, req: CreateVendedorRequest
    ) -> VendedorOut:
        vendedor = await self._repo.create(db, req.nombre, req.cedula, req.telefono)
        logger.info("vendedor created id=%s", vendedor.id)
        return VendedorOut.from_domain(vendedor)

    async def update_vendedor(
        self, db: AsyncSession, vendedor_id: str, req: UpdateVendedorRequest
    ) -> VendedorOut:
        vendedor = await self._repo.update(db, vendedor_id, req.changes())
        if vendedor is None:
            raise VendedorNotFoundError(vendedor_id)
        logger.info("vendedor updated id=%s", vendedor_id)
        return VendedorOut.from_domain(vendedor)

    async def assign_bancas(
        self, db: AsyncSession, vendedor_id: str, banca_ids: list[str]
    ) -> list[BancaOut]:
        """Replace the vendedor's assignments with exactly ``banca_ids``."""
        if await self._repo.get_by_id(db, vendedor_id) is None:
            raise VendedorNotFoundError(vendedor_id)

        unique_ids = list(dict.fromkeys(banca_ids))
        missing: list[dict[str, str]] = []
        for i, banca_id in enumerate(unique_ids):
            if await self._bancas.get_by_id(db, banca_id) is None:
                missing.append(
                    {"field": f"banca_ids.{i}", "message": f"Banca no encontrada: {banca_id}"}
                )
        if missing:
            raise ValidationError("Bancas inexistentes", details=missing)

        try:
            await self._repo.replace_assignments(db, vendedor_id, unique_ids)
        except AppError:
            logger.error(
                "assigning vendedor %s to bancas %s failed", vendedor_id, unique_ids
            )
            raise
        logger.info("vendedor %s assigned to bancas %s", vendedor_id, unique_ids)
        return await self.list_bancas(db, vendedor_id)

    async def list_bancas(self, db: AsyncSession, vendedor_id: str) -> list[BancaOut]:
        if await self._repo.get_by_id(db, vendedor_id) is None:
            raise VendedorNotFoundError(vendedor_id)
        bancas = await self._repo.list_assigned_bancas(db, vendedor_id)
        return [BancaOut.from_domain(b) for b in bancas]

    async def remove_banca(self, db: AsyncSession, vendedor_id: str, banca_id: str) -> bool:
        removed = await self._repo.remove_assignment(db, vendedor_id, banca_id)
        logger.info(
            "vendedor %s removed from banca %s (existed=%s)", vendedor_id, banca_id, removed
        )
        return removed
