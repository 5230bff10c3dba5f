"""Translate Postgres integrity violations into domain errors.

SQLSTATE reference:
  23505 unique_violation      -> the caller's ConflictError
  23503 foreign_key_violation -> ValidationError
Anything else is re-raised untouched and ends up as a 500.
"""

from typing import NoReturn

from sqlalchemy.exc import IntegrityError

from src.lt_common.errors import AppError, ValidationError

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def sqlstate_of(exc: IntegrityError) -> str | None:
    """SQLSTATE from the asyncpg adapter (``orig.sqlstate``) or its cause."""
    orig = exc.orig
    state = getattr(orig, "sqlstate", None)
    if state is None:
        state = getattr(getattr(orig, "__cause__", None), "sqlstate", None)
    return state


def raise_for_integrity(exc: IntegrityError, on_conflict: AppError | None = None) -> NoReturn:
    """Raise the mapped domain error, or re-raise ``exc`` when unmapped."""
    state = sqlstate_of(exc)
    if state == UNIQUE_VIOLATION and on_conflict is not None:
        raise on_conflict from exc
    if state == FOREIGN_KEY_VIOLATION:
        raise ValidationError("Referencia a una entidad inexistente") from exc
    raise exc
