"""JugadaApplicationService — reads plus delegation to the lifecycle engine.

Write methods expect the caller (router) to hold ``async with db.begin()``.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.infrastructure.persistence import BancaRepository
from src.lt_common.errors import JugadaNotFoundError
from src.lt_common.pagination import Pagination, PaginationMeta, build_meta
from src.lt_gateway.auth.principal import Principal
from src.lt_jugada.application.schemas import (
    CreateJugadaBatchRequest,
    CreateJugadaRequest,
    JugadaOut,
)
from src.lt_jugada.domain.lifecycle import WagerLifecycleEngine
from src.lt_jugada.domain.models import JugadaFilters
from src.lt_jugada.domain.repository import JugadaRepositoryProtocol
from src.lt_jugada.infrastructure.persistence import JugadaRepository, ResultadoRepository
from src.lt_vendedor.infrastructure.persistence import VendedorRepository

logger = logging.getLogger(__name__)


class JugadaApplicationService:
    def __init__(
        self,
        repo: JugadaRepositoryProtocol | None = None,
        engine: WagerLifecycleEngine | None = None,
    ) -> None:
        self._repo: JugadaRepositoryProtocol = repo or JugadaRepository()
        self._engine = engine or WagerLifecycleEngine(
            bancas=BancaRepository(),
            vendedores=VendedorRepository(),
            jugadas=self._repo,
            resultados=ResultadoRepository(),
        )

    async def list_jugadas(
        self, db: AsyncSession, pagination: Pagination, filters: JugadaFilters
    ) -> tuple[list[JugadaOut], PaginationMeta]:
        total = await self._repo.count_jugadas(db, filters)
        jugadas = await self._repo.list_jugadas(
            db, filters, pagination.limit, pagination.offset
        )
        return [JugadaOut.from_domain(j) for j in jugadas], build_meta(pagination, total)

    async def get_jugada(self, db: AsyncSession, jugada_id: str) -> JugadaOut:
        jugada = await self._repo.get_by_id(db, jugada_id)
        if jugada is None:
            raise JugadaNotFoundError(jugada_id)
        return JugadaOut.from_domain(jugada)

    async def create_jugada(
        self, db: AsyncSession, req: CreateJugadaRequest, principal: Principal
    ) -> JugadaOut:
        jugada = await self._engine.create(db, req.to_domain(), principal)
        return JugadaOut.from_domain(jugada)

    async def create_batch(
        self, db: AsyncSession, req: CreateJugadaBatchRequest, principal: Principal
    ) -> list[JugadaOut]:
        jugadas = await self._engine.create_batch(
            db, [item.to_domain() for item in req.jugadas], principal
        )
        return [JugadaOut.from_domain(j) for j in jugadas]

    async def cancel_jugada(
        self, db: AsyncSession, jugada_id: str, principal: Principal
    ) -> JugadaOut:
        jugada = await self._engine.cancel(db, jugada_id, principal)
        return JugadaOut.from_domain(jugada)
