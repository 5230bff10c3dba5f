"""Pydantic schemas for lt_vendedor requests and responses.

Cédula (Dominican national id) is stored as its 11 digits, without dashes,
so that "001-1234567-8" and "00112345678" collide on the UNIQUE constraint.
"""

import re
import uuid

from pydantic import BaseModel, Field, field_validator

from src.lt_common.enums import EstadoVendedor
from src.lt_vendedor.domain.models import Vendedor

_CEDULA_RE = re.compile(r"^\d{3}-?\d{7}-?\d$")


def _normalize_cedula(value: str) -> str:
    value = value.strip()
    if not _CEDULA_RE.match(value):
        raise ValueError("Cédula debe tener 11 dígitos (formato 000-0000000-0)")
    return value.replace("-", "")


class CreateVendedorRequest(BaseModel):
    nombre: str = Field(..., min_length=2, max_length=120)
    cedula: str
    telefono: str | None = Field(None, max_length=20)

    @field_validator("cedula")
    @classmethod
    def cedula_format(cls, v: str) -> str:
        return _normalize_cedula(v)


class UpdateVendedorRequest(BaseModel):
    """Partial update: only fields present in the body are written."""

    nombre: str | None = Field(None, min_length=2, max_length=120)
    cedula: str | None = None
    telefono: str | None = Field(None, max_length=20)
    estado: EstadoVendedor | None = None

    @field_validator("cedula")
    @classmethod
    def cedula_format(cls, v: str | None) -> str | None:
        return _normalize_cedula(v) if v is not None else None

    def changes(self) -> dict[str, object]:
        data = self.model_dump(exclude_unset=True)
        for required in ("nombre", "cedula", "estado"):
            if data.get(required) is None:
                data.pop(required, None)
        if "estado" in data:
            data["estado"] = data["estado"].value
        return data


class AssignBancasRequest(BaseModel):
    banca_ids: list[uuid.UUID] = Field(..., max_length=200)


class VendedorOut(BaseModel):
    id: str
    nombre: str
    cedula: str
    telefono: str | None
    estado: EstadoVendedor
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, v: Vendedor) -> "VendedorOut":
        return cls(
            id=v.id,
            nombre=v.nombre,
            cedula=v.cedula,
            telefono=v.telefono,
            estado=EstadoVendedor(v.estado),
            created_at=v.created_at.isoformat() if v.created_at else None,
            updated_at=v.updated_at.isoformat() if v.updated_at else None,
        )
