# src/lt_jugada/domain/repository.py
"""Repository Protocols used by the wager lifecycle engine and the service.

The engine only ever sees these Protocols; tests pass in-memory fakes.
"""

from datetime import date, datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_jugada.domain.models import Jugada, JugadaFilters, NuevaJugada, Resultado


class JugadaRepositoryProtocol(Protocol):
    async def insert(
        self, db: AsyncSession, jugada: NuevaJugada, fecha_hora: datetime
    ) -> Jugada:
        """Persist as ``valida`` with ``premio = 0``."""
        ...

    async def insert_many(
        self, db: AsyncSession, jugadas: list[NuevaJugada], fecha_hora: datetime
    ) -> list[Jugada]:
        """Single statement; all rows or none."""
        ...

    async def get_by_id(self, db: AsyncSession, jugada_id: str) -> Jugada | None: ...

    async def mark_cancelled(self, db: AsyncSession, jugada_id: str) -> Jugada | None:
        """valida -> anulada. Returns None when the row was not ``valida``."""
        ...

    async def list_jugadas(
        self,
        db: AsyncSession,
        filters: JugadaFilters,
        limit: int,
        offset: int,
    ) -> list[Jugada]: ...

    async def count_jugadas(self, db: AsyncSession, filters: JugadaFilters) -> int: ...


class ResultadoRepositoryProtocol(Protocol):
    async def get_for(self, db: AsyncSession, sorteo_id: str, fecha: date) -> Resultado | None: ...
