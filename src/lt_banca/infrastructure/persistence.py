"""BancaRepository — concrete implementation of BancaRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.domain.models import Banca
from src.lt_common.db_errors import raise_for_integrity
from src.lt_common.errors import BancaNameExistsError

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

BANCA_COLUMNS = "id, nombre, ubicacion, estado, ip_whitelist, created_at, updated_at"

_GET_BANCA_SQL = text(f"""
    SELECT {BANCA_COLUMNS}
    FROM bancas
    WHERE id = CAST(:banca_id AS UUID)
""")

_GET_BANCA_FOR_SHARE_SQL = text(f"""
    SELECT {BANCA_COLUMNS}
    FROM bancas
    WHERE id = CAST(:banca_id AS UUID)
    FOR SHARE
""")

_LIST_BANCAS_SQL = text(f"""
    SELECT {BANCA_COLUMNS}
    FROM bancas
    WHERE (CAST(:estado AS TEXT) IS NULL OR estado = CAST(:estado AS TEXT))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_BANCAS_SQL = text("""
    SELECT COUNT(*) AS total
    FROM bancas
    WHERE (CAST(:estado AS TEXT) IS NULL OR estado = CAST(:estado AS TEXT))
""")

_INSERT_BANCA_SQL = text(f"""
    INSERT INTO bancas (nombre, ubicacion, ip_whitelist)
    VALUES (:nombre, :ubicacion, :ip_whitelist)
    RETURNING {BANCA_COLUMNS}
""")

# Columns a PATCH may touch; anything else never reaches the SQL text.
_UPDATABLE_COLUMNS = ("nombre", "ubicacion", "ip_whitelist", "estado")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def row_to_banca(row: Any) -> Banca:
    return Banca(
        id=str(row.id),
        nombre=row.nombre,
        ubicacion=row.ubicacion,
        estado=row.estado,
        ip_whitelist=list(row.ip_whitelist or []),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BancaRepository:
    async def get_by_id(
        self, db: AsyncSession, banca_id: str, lock: bool = False
    ) -> Banca | None:
        sql = _GET_BANCA_FOR_SHARE_SQL if lock else _GET_BANCA_SQL
        result = await db.execute(sql, {"banca_id": banca_id})
        row = result.fetchone()
        return row_to_banca(row) if row else None

    async def list_bancas(
        self, db: AsyncSession, estado: str | None, limit: int, offset: int
    ) -> list[Banca]:
        result = await db.execute(
            _LIST_BANCAS_SQL, {"estado": estado, "limit": limit, "offset": offset}
        )
        return [row_to_banca(row) for row in result.fetchall()]

    async def count_bancas(self, db: AsyncSession, estado: str | None) -> int:
        result = await db.execute(_COUNT_BANCAS_SQL, {"estado": estado})
        return int(result.scalar_one())

    async def create(
        self,
        db: AsyncSession,
        nombre: str,
        ubicacion: str | None,
        ip_whitelist: list[str],
    ) -> Banca:
        try:
            result = await db.execute(
                _INSERT_BANCA_SQL,
                {"nombre": nombre, "ubicacion": ubicacion, "ip_whitelist": ip_whitelist},
            )
        except IntegrityError as exc:
            raise_for_integrity(exc, on_conflict=BancaNameExistsError())
        return row_to_banca(result.fetchone())

    async def update(
        self, db: AsyncSession, banca_id: str, fields: dict[str, Any]
    ) -> Banca | None:
        columns = [c for c in _UPDATABLE_COLUMNS if c in fields]
        if not columns:
            return await self.get_by_id(db, banca_id)

        assignments = ", ".join(f"{c} = :{c}" for c in columns)
        sql = text(f"""
            UPDATE bancas
            SET {assignments}, updated_at = NOW()
            WHERE id = CAST(:banca_id AS UUID)
            RETURNING {BANCA_COLUMNS}
        """)
        params = {c: fields[c] for c in columns}
        params["banca_id"] = banca_id
        try:
            result = await db.execute(sql, params)
        except IntegrityError as exc:
            raise_for_integrity(exc, on_conflict=BancaNameExistsError())
        row = result.fetchone()
        return row_to_banca(row) if row else None
