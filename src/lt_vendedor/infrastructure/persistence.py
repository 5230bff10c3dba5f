"""VendedorRepository — raw SQL persistence for vendedores and bancas_vendedores."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.domain.models import Banca
from src.lt_banca.infrastructure.persistence import BANCA_COLUMNS, row_to_banca
from src.lt_common.db_errors import raise_for_integrity
from src.lt_common.errors import CedulaExistsError
from src.lt_vendedor.domain.models import Vendedor

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_COLUMNS = "id, nombre, cedula, telefono, estado, created_at, updated_at"

_GET_VENDEDOR_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM vendedores
    WHERE id = CAST(:vendedor_id AS UUID)
""")

_LIST_VENDEDORES_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM vendedores
    WHERE (CAST(:estado AS TEXT) IS NULL OR estado = CAST(:estado AS TEXT))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_VENDEDORES_SQL = text("""
    SELECT COUNT(*) AS total
    FROM vendedores
    WHERE (CAST(:estado AS TEXT) IS NULL OR estado = CAST(:estado AS TEXT))
""")

_INSERT_VENDEDOR_SQL = text(f"""
    INSERT INTO vendedores (nombre, cedula, telefono)
    VALUES (:nombre, :cedula, :telefono)
    RETURNING {_COLUMNS}
""")

_IS_ASSIGNED_SQL = text("""
    SELECT 1
    FROM bancas_vendedores
    WHERE vendedor_id = CAST(:vendedor_id AS UUID)
      AND banca_id = CAST(:banca_id AS UUID)
""")

_DELETE_ASSIGNMENTS_SQL = text("""
    DELETE FROM bancas_vendedores
    WHERE vendedor_id = CAST(:vendedor_id AS UUID)
""")

_INSERT_ASSIGNMENTS_SQL = text("""
    INSERT INTO bancas_vendedores (vendedor_id, banca_id)
    SELECT CAST(:vendedor_id AS UUID), banca_id
    FROM unnest(CAST(:banca_ids AS UUID[])) AS banca_id
""")

_LIST_ASSIGNED_BANCAS_SQL = text(f"""
    SELECT {BANCA_COLUMNS}
    FROM bancas
    WHERE id IN (
        SELECT banca_id FROM bancas_vendedores
        WHERE vendedor_id = CAST(:vendedor_id AS UUID)
    )
    ORDER BY nombre
""")

_DELETE_ASSIGNMENT_SQL = text("""
    DELETE FROM bancas_vendedores
    WHERE vendedor_id = CAST(:vendedor_id AS UUID)
      AND banca_id = CAST(:banca_id AS UUID)
""")

_UPDATABLE_COLUMNS = ("nombre", "cedula", "telefono", "estado")


def _row_to_vendedor(row: Any) -> Vendedor:
    return Vendedor(
        id=str(row.id),
        nombre=row.nombre,
        cedula=row.cedula,
        telefono=row.telefono,
        estado=row.estado,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class VendedorRepository:
    async def get_by_id(self, db: AsyncSession, vendedor_id: str) -> Vendedor | None:
        result = await db.execute(_GET_VENDEDOR_SQL, {"vendedor_id": vendedor_id})
        row = result.fetchone()
        return _row_to_vendedor(row) if row else None

    async def list_vendedores(
        self, db: AsyncSession, estado: str | None, limit: int, offset: int
    ) -> list[Vendedor]:
        result = await db.execute(
            _LIST_VENDEDORES_SQL, {"estado": estado, "limit": limit, "offset": offset}
        )
        return [_row_to_vendedor(row) for row in result.fetchall()]

    async def count_vendedores(self, db: AsyncSession, estado: str | None) -> int:
        result = await db.execute(_COUNT_VENDEDORES_SQL, {"estado": estado})
        return int(result.scalar_one())

    async def create(
        self, db: AsyncSession, nombre: str, cedula: str, telefono: str | None
    ) -> Vendedor:
        try:
            result = await db.execute(
                _INSERT_VENDEDOR_SQL,
                {"nombre": nombre, "cedula": cedula, "telefono": telefono},
            )
        except IntegrityError as exc:
            raise_for_integrity(exc, on_conflict=CedulaExistsError())
        return _row_to_vendedor(result.fetchone())

    async def update(
        self, db: AsyncSession, vendedor_id: str, fields: dict[str, Any]
    ) -> Vendedor | None:
        columns = [c for c in _UPDATABLE_COLUMNS if c in fields]
        if not columns:
            return await self.get_by_id(db, vendedor_id)

        assignments = ", ".join(f"{c} = :{c}" for c in columns)
        sql = text(f"""
            UPDATE vendedores
            SET {assignments}, updated_at = NOW()
            WHERE id = CAST(:vendedor_id AS UUID)
            RETURNING {_COLUMNS}
        """)
        params = {c: fields[c] for c in columns}
        params["vendedor_id"] = vendedor_id
        try:
            result = await db.execute(sql, params)
        except IntegrityError as exc:
            raise_for_integrity(exc, on_conflict=CedulaExistsError())
        row = result.fetchone()
        return _row_to_vendedor(row) if row else None

    async def is_assigned(self, db: AsyncSession, vendedor_id: str, banca_id: str) -> bool:
        result = await db.execute(
            _IS_ASSIGNED_SQL, {"vendedor_id": vendedor_id, "banca_id": banca_id}
        )
        return result.fetchone() is not None

    async def replace_assignments(
        self, db: AsyncSession, vendedor_id: str, banca_ids: list[str]
    ) -> None:
        """Delete + insert; atomic only inside the caller's transaction."""
        await db.execute(_DELETE_ASSIGNMENTS_SQL, {"vendedor_id": vendedor_id})
        if not banca_ids:
            return
        try:
            await db.execute(
                _INSERT_ASSIGNMENTS_SQL,
                {"vendedor_id": vendedor_id, "banca_ids": banca_ids},
            )
        except IntegrityError as exc:
            raise_for_integrity(exc)

    async def list_assigned_bancas(self, db: AsyncSession, vendedor_id: str) -> list[Banca]:
        result = await db.execute(_LIST_ASSIGNED_BANCAS_SQL, {"vendedor_id": vendedor_id})
        return [row_to_banca(row) for row in result.fetchall()]

    async def remove_assignment(
        self, db: AsyncSession, vendedor_id: str, banca_id: str
    ) -> bool:
        result = await db.execute(
            _DELETE_ASSIGNMENT_SQL, {"vendedor_id": vendedor_id, "banca_id": banca_id}
        )
        return bool(result.rowcount)
