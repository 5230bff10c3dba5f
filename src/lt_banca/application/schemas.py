"""Pydantic schemas for lt_banca requests and responses."""

import ipaddress

from pydantic import BaseModel, Field, field_validator

from src.lt_banca.domain.models import Banca
from src.lt_common.enums import EstadoBanca


def _normalize_ips(values: list[str] | None) -> list[str] | None:
    """Validate each entry as an IPv4/IPv6 address and return canonical text."""
    if values is None:
        return None
    normalized: list[str] = []
    for value in values:
        try:
            normalized.append(str(ipaddress.ip_address(value.strip())))
        except ValueError:
            raise ValueError(f"IP inválida: {value}") from None
    return list(dict.fromkeys(normalized))


class CreateBancaRequest(BaseModel):
    nombre: str = Field(..., min_length=2, max_length=120)
    ubicacion: str | None = Field(None, min_length=5, max_length=255)
    ip_whitelist: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("ip_whitelist")
    @classmethod
    def ips_are_addresses(cls, v: list[str]) -> list[str]:
        return _normalize_ips(v) or []


class UpdateBancaRequest(BaseModel):
    """Partial update: only fields present in the body are written."""

    nombre: str | None = Field(None, min_length=2, max_length=120)
    ubicacion: str | None = Field(None, min_length=5, max_length=255)
    ip_whitelist: list[str] | None = Field(None, max_length=50)
    estado: EstadoBanca | None = None

    @field_validator("ip_whitelist")
    @classmethod
    def ips_are_addresses(cls, v: list[str] | None) -> list[str] | None:
        return _normalize_ips(v)

    def changes(self) -> dict[str, object]:
        data = self.model_dump(exclude_unset=True)
        if data.get("nombre") is None:
            data.pop("nombre", None)
        if data.get("ip_whitelist") is None:
            data.pop("ip_whitelist", None)
        if data.get("estado") is None:
            data.pop("estado", None)
        else:
            data["estado"] = data["estado"].value
        return data


class BancaOut(BaseModel):
    id: str
    nombre: str
    ubicacion: str | None
    estado: EstadoBanca
    ip_whitelist: list[str]
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, b: Banca) -> "BancaOut":
        return cls(
            id=b.id,
            nombre=b.nombre,
            ubicacion=b.ubicacion,
            estado=EstadoBanca(b.estado),
            ip_whitelist=b.ip_whitelist,
            created_at=b.created_at.isoformat() if b.created_at else None,
            updated_at=b.updated_at.isoformat() if b.updated_at else None,
        )
