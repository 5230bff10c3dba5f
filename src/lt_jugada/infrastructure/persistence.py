"""JugadaRepository / ResultadoRepository — raw text() SQL persistence.

asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.db_errors import raise_for_integrity
from src.lt_jugada.domain.models import Jugada, JugadaFilters, NuevaJugada, Resultado

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = (
    "id, banca_id, vendedor_id, sorteo_id, numeros, fecha_hora, estado, premio, "
    "created_at, updated_at"
)

_JOINED_COLUMNS = """
    j.id, j.banca_id, j.vendedor_id, j.sorteo_id, j.numeros, j.fecha_hora,
    j.estado, j.premio, j.created_at, j.updated_at,
    b.nombre AS banca_nombre, v.nombre AS vendedor_nombre, s.nombre AS sorteo_nombre
"""

_JOINS = """
    FROM jugadas j
    LEFT JOIN bancas b ON b.id = j.banca_id
    LEFT JOIN vendedores v ON v.id = j.vendedor_id
    LEFT JOIN sorteos s ON s.id = j.sorteo_id
"""

_FILTERS = """
    WHERE (CAST(:fecha_desde AS TIMESTAMPTZ) IS NULL OR j.fecha_hora >= CAST(:fecha_desde AS TIMESTAMPTZ))
      AND (CAST(:fecha_hasta AS TIMESTAMPTZ) IS NULL OR j.fecha_hora <= CAST(:fecha_hasta AS TIMESTAMPTZ))
      AND (CAST(:banca_id AS UUID) IS NULL OR j.banca_id = CAST(:banca_id AS UUID))
      AND (CAST(:vendedor_id AS UUID) IS NULL OR j.vendedor_id = CAST(:vendedor_id AS UUID))
      AND (CAST(:sorteo_id AS UUID) IS NULL OR j.sorteo_id = CAST(:sorteo_id AS UUID))
      AND (CAST(:estado AS TEXT) IS NULL OR j.estado = CAST(:estado AS TEXT))
      AND (CAST(:numero AS SMALLINT) IS NULL OR CAST(:numero AS SMALLINT) = ANY(j.numeros))
"""

_GET_JUGADA_SQL = text(f"""
    SELECT {_JOINED_COLUMNS}
    {_JOINS}
    WHERE j.id = CAST(:jugada_id AS UUID)
""")

_LIST_JUGADAS_SQL = text(f"""
    SELECT {_JOINED_COLUMNS}
    {_JOINS}
    {_FILTERS}
    ORDER BY j.fecha_hora DESC, j.id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_JUGADAS_SQL = text(f"""
    SELECT COUNT(*) AS total
    FROM jugadas j
    {_FILTERS}
""")

_INSERT_JUGADA_SQL = text(f"""
    INSERT INTO jugadas (banca_id, vendedor_id, sorteo_id, numeros, fecha_hora, estado, premio)
    VALUES (
        CAST(:banca_id AS UUID), CAST(:vendedor_id AS UUID), CAST(:sorteo_id AS UUID),
        CAST(:numeros AS SMALLINT[]), :fecha_hora, 'valida', 0
    )
    RETURNING {_COLUMNS}
""")

# One statement for the whole batch; numeros travel as JSON arrays so rows of
# different lengths can share a single unnest.
_INSERT_MANY_SQL = text(f"""
    INSERT INTO jugadas (banca_id, vendedor_id, sorteo_id, numeros, fecha_hora, estado, premio)
    SELECT
        item.banca_id, item.vendedor_id, item.sorteo_id,
        ARRAY(SELECT CAST(n AS SMALLINT) FROM jsonb_array_elements_text(item.numeros) AS n),
        :fecha_hora, 'valida', 0
    FROM unnest(
        CAST(:banca_ids AS UUID[]),
        CAST(:vendedor_ids AS UUID[]),
        CAST(:sorteo_ids AS UUID[]),
        CAST(:numeros AS JSONB[])
    ) WITH ORDINALITY AS item(banca_id, vendedor_id, sorteo_id, numeros, pos)
    ORDER BY item.pos
    RETURNING {_COLUMNS}
""")

_MARK_CANCELLED_SQL = text(f"""
    UPDATE jugadas
    SET estado = 'anulada', updated_at = NOW()
    WHERE id = CAST(:jugada_id AS UUID)
      AND estado = 'valida'
    RETURNING {_COLUMNS}
""")

_GET_RESULTADO_SQL = text("""
    SELECT sorteo_id, fecha, publicado
    FROM resultados
    WHERE sorteo_id = CAST(:sorteo_id AS UUID)
      AND fecha = :fecha
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_jugada(row: Any) -> Jugada:
    mapping = row._mapping
    return Jugada(
        id=str(row.id),
        banca_id=str(row.banca_id),
        vendedor_id=str(row.vendedor_id),
        sorteo_id=str(row.sorteo_id),
        numeros=list(row.numeros or []),
        fecha_hora=row.fecha_hora,
        estado=row.estado,
        premio=Decimal(row.premio if row.premio is not None else 0),
        created_at=row.created_at,
        updated_at=row.updated_at,
        banca_nombre=mapping.get("banca_nombre"),
        vendedor_nombre=mapping.get("vendedor_nombre"),
        sorteo_nombre=mapping.get("sorteo_nombre"),
    )


def _row_to_resultado(row: Any) -> Resultado:
    return Resultado(
        sorteo_id=str(row.sorteo_id),
        fecha=row.fecha,
        publicado=bool(row.publicado),
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class JugadaRepository:
    async def insert(
        self, db: AsyncSession, jugada: NuevaJugada, fecha_hora: datetime
    ) -> Jugada:
        try:
            result = await db.execute(
                _INSERT_JUGADA_SQL,
                {
                    "banca_id": jugada.banca_id,
                    "vendedor_id": jugada.vendedor_id,
                    "sorteo_id": jugada.sorteo_id,
                    "numeros": jugada.numeros,
                    "fecha_hora": fecha_hora,
                },
            )
        except IntegrityError as exc:
            raise_for_integrity(exc)
        return _row_to_jugada(result.fetchone())

    async def insert_many(
        self, db: AsyncSession, jugadas: list[NuevaJugada], fecha_hora: datetime
    ) -> list[Jugada]:
        if not jugadas:
            return []
        params = {
            "banca_ids": [j.banca_id for j in jugadas],
            "vendedor_ids": [j.vendedor_id for j in jugadas],
            "sorteo_ids": [j.sorteo_id for j in jugadas],
            "numeros": [json.dumps(j.numeros) for j in jugadas],
            "fecha_hora": fecha_hora,
        }
        try:
            result = await db.execute(_INSERT_MANY_SQL, params)
        except IntegrityError as exc:
            raise_for_integrity(exc)
        return [_row_to_jugada(row) for row in result.fetchall()]

    async def get_by_id(self, db: AsyncSession, jugada_id: str) -> Jugada | None:
        result = await db.execute(_GET_JUGADA_SQL, {"jugada_id": jugada_id})
        row = result.fetchone()
        return _row_to_jugada(row) if row else None

    async def mark_cancelled(self, db: AsyncSession, jugada_id: str) -> Jugada | None:
        result = await db.execute(_MARK_CANCELLED_SQL, {"jugada_id": jugada_id})
        row = result.fetchone()
        return _row_to_jugada(row) if row else None

    async def list_jugadas(
        self, db: AsyncSession, filters: JugadaFilters, limit: int, offset: int
    ) -> list[Jugada]:
        params = filters.as_params()
        params.update(limit=limit, offset=offset)
        result = await db.execute(_LIST_JUGADAS_SQL, params)
        return [_row_to_jugada(row) for row in result.fetchall()]

    async def count_jugadas(self, db: AsyncSession, filters: JugadaFilters) -> int:
        result = await db.execute(_COUNT_JUGADAS_SQL, filters.as_params())
        return int(result.scalar_one())


class ResultadoRepository:
    async def get_for(self, db: AsyncSession, sorteo_id: str, fecha: date) -> Resultado | None:
        result = await db.execute(_GET_RESULTADO_SQL, {"sorteo_id": sorteo_id, "fecha": fecha})
        row = result.fetchone()
        return _row_to_resultado(row) if row else None
