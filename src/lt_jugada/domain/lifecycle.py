"""WagerLifecycleEngine — preconditions for creating and cancelling jugadas.

Creation (single):
  1. banca exists and is activa
  2. vendedor exists and is activo
  3. vendedor is assigned to the banca
  Nothing is written until all three pass.

Creation (batch):
  Every item's banca must exist and be activa. Bancas are read FOR SHARE in the
  caller's transaction, then all rows go in with one INSERT.

Cancellation, checked in order:
  1. jugada exists (404)
  2. not already anulada
  3. elapsed minutes since fecha_hora <= grace period
  4. no published resultado for (sorteo_id, UTC date of fecha_hora)
  5. conditional valida -> anulada update; losing a race reads as "already anulada"
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.lt_banca.domain.repository import BancaRepositoryProtocol
from src.lt_common.datetime_utils import minutes_between, utc_date, utc_now
from src.lt_common.enums import EstadoBanca, EstadoJugada, EstadoVendedor
from src.lt_common.errors import (
    BancaUnavailableError,
    CancellationWindowExpiredError,
    JugadaAlreadyCancelledError,
    JugadaNotFoundError,
    ResultAlreadyPublishedError,
    VendedorNotAssignedError,
    VendedorUnavailableError,
)
from src.lt_gateway.auth.principal import Principal
from src.lt_jugada.domain.models import Jugada, NuevaJugada
from src.lt_jugada.domain.repository import (
    JugadaRepositoryProtocol,
    ResultadoRepositoryProtocol,
)
from src.lt_vendedor.domain.repository import VendedorRepositoryProtocol

logger = logging.getLogger(__name__)


class WagerLifecycleEngine:
    def __init__(
        self,
        bancas: BancaRepositoryProtocol,
        vendedores: VendedorRepositoryProtocol,
        jugadas: JugadaRepositoryProtocol,
        resultados: ResultadoRepositoryProtocol,
        grace_minutes: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._bancas = bancas
        self._vendedores = vendedores
        self._jugadas = jugadas
        self._resultados = resultados
        self._grace_minutes = (
            grace_minutes if grace_minutes is not None else settings.ANULACION_MINUTOS
        )
        self._clock = clock

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    async def create(
        self, db: AsyncSession, data: NuevaJugada, principal: Principal
    ) -> Jugada:
        banca = await self._bancas.get_by_id(db, data.banca_id)
        if banca is None:
            raise BancaUnavailableError("Banca no encontrada")
        if banca.estado != EstadoBanca.ACTIVA.value:
            raise BancaUnavailableError("La banca debe estar activa para registrar jugadas")

        vendedor = await self._vendedores.get_by_id(db, data.vendedor_id)
        if vendedor is None:
            raise VendedorUnavailableError("Vendedor no encontrado")
        if vendedor.estado != EstadoVendedor.ACTIVO.value:
            raise VendedorUnavailableError(
                "El vendedor debe estar activo para registrar jugadas"
            )

        if not await self._vendedores.is_assigned(db, data.vendedor_id, data.banca_id):
            raise VendedorNotAssignedError()

        jugada = await self._jugadas.insert(db, data, self._clock())
        logger.info(
            "jugada created id=%s banca=%s vendedor=%s by=%s",
            jugada.id, data.banca_id, data.vendedor_id, principal.id,
        )
        return jugada

    async def create_batch(
        self, db: AsyncSession, items: list[NuevaJugada], principal: Principal
    ) -> list[Jugada]:
        for banca_id in dict.fromkeys(item.banca_id for item in items):
            banca = await self._bancas.get_by_id(db, banca_id, lock=True)
            if banca is None or banca.estado != EstadoBanca.ACTIVA.value:
                raise BancaUnavailableError(f"Banca {banca_id} no válida")

        jugadas = await self._jugadas.insert_many(db, items, self._clock())
        logger.info("batch of %d jugadas created by=%s", len(jugadas), principal.id)
        return jugadas

    # ------------------------------------------------------------------
    # cancel
    # ------------------------------------------------------------------

    async def cancel(self, db: AsyncSession, jugada_id: str, principal: Principal) -> Jugada:
        jugada = await self._jugadas.get_by_id(db, jugada_id)
        if jugada is None:
            raise JugadaNotFoundError(jugada_id)
        if jugada.estado == EstadoJugada.ANULADA.value:
            raise JugadaAlreadyCancelledError()

        elapsed = minutes_between(jugada.fecha_hora, self._clock())
        if elapsed > self._grace_minutes:
            raise CancellationWindowExpiredError(self._grace_minutes)

        resultado = await self._resultados.get_for(
            db, jugada.sorteo_id, utc_date(jugada.fecha_hora)
        )
        if resultado is not None and resultado.publicado:
            raise ResultAlreadyPublishedError()

        cancelled = await self._jugadas.mark_cancelled(db, jugada_id)
        if cancelled is None:
            logger.warning("jugada %s was cancelled concurrently", jugada_id)
            raise JugadaAlreadyCancelledError()
        logger.info(
            "jugada cancelled id=%s elapsed=%.1fmin by=%s", jugada_id, elapsed, principal.id
        )
        return cancelled
