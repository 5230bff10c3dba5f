"""BancaApplicationService — thin composition layer over BancaRepository.

Write methods expect the caller (router) to hold ``async with db.begin()``.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.application.schemas import BancaOut, CreateBancaRequest, UpdateBancaRequest
from src.lt_banca.domain.repository import BancaRepositoryProtocol
from src.lt_banca.infrastructure.persistence import BancaRepository
from src.lt_common.enums import EstadoBanca
from src.lt_common.errors import BancaNotFoundError
from src.lt_common.pagination import Pagination, PaginationMeta, build_meta

logger = logging.getLogger(__name__)


class BancaApplicationService:
    def __init__(self, repo: BancaRepositoryProtocol | None = None) -> None:
        self._repo: BancaRepositoryProtocol = repo or BancaRepository()

    async def list_bancas(
        self,
        db: AsyncSession,
        pagination: Pagination,
        estado: EstadoBanca | None,
    ) -> tuple[list[BancaOut], PaginationMeta]:
        estado_value = estado.value if estado else None
        total = await self._repo.count_bancas(db, estado_value)
        bancas = await self._repo.list_bancas(
            db, estado_value, pagination.limit, pagination.offset
        )
        return [BancaOut.from_domain(b) for b in bancas], build_meta(pagination, total)

    async def get_banca(self, db: AsyncSession, banca_id: str) -> BancaOut:
        banca = await self._repo.get_by_id(db, banca_id)
        if banca is None:
            raise BancaNotFoundError(banca_id)
        return BancaOut.from_domain(banca)

    async def create_banca(self, db: AsyncSession, req: CreateBancaRequest) -> BancaOut:
        banca = await self._repo.create(db, req.nombre, req.ubicacion, req.ip_whitelist)
        logger.info("banca created id=%s", banca.id)
        return BancaOut.from_domain(banca)

    async def update_banca(
        self, db: AsyncSession, banca_id: str, req: UpdateBancaRequest
    ) -> BancaOut:
        banca = await self._repo.update(db, banca_id, req.changes())
        if banca is None:
            raise BancaNotFoundError(banca_id)
        logger.info("banca updated id=%s", banca_id)
        return BancaOut.from_domain(banca)

    async def set_estado(
        self, db: AsyncSession, banca_id: str, estado: EstadoBanca
    ) -> BancaOut:
        banca = await self._repo.update(db, banca_id, {"estado": estado.value})
        if banca is None:
            raise BancaNotFoundError(banca_id)
        logger.info("banca %s estado=%s", banca_id, estado.value)
        return BancaOut.from_domain(banca)
