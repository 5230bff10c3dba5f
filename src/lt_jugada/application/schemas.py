"""Pydantic schemas for lt_jugada requests and responses.

Request bodies accept the Spanish wire names (``sorteo_id``, ``numeros``) and
their English aliases (``draw_id``, ``numbers``).
"""

import uuid
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.lt_common.enums import EstadoJugada
from src.lt_jugada.domain.models import Jugada, NuevaJugada

MAX_NUMEROS = 3
MAX_BATCH = 100


class CreateJugadaRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    banca_id: uuid.UUID
    vendedor_id: uuid.UUID
    sorteo_id: uuid.UUID = Field(..., validation_alias=AliasChoices("sorteo_id", "draw_id"))
    numeros: list[int] = Field(
        ...,
        min_length=1,
        max_length=MAX_NUMEROS,
        validation_alias=AliasChoices("numeros", "numbers"),
    )

    @field_validator("numeros")
    @classmethod
    def numeros_in_range(cls, v: list[int]) -> list[int]:
        for n in v:
            if not 0 <= n <= 99:
                raise ValueError("Cada número debe estar entre 0 y 99")
        return v

    def to_domain(self) -> NuevaJugada:
        return NuevaJugada(
            banca_id=str(self.banca_id),
            vendedor_id=str(self.vendedor_id),
            sorteo_id=str(self.sorteo_id),
            numeros=list(self.numeros),
        )


class CreateJugadaBatchRequest(BaseModel):
    jugadas: list[CreateJugadaRequest] = Field(..., min_length=1, max_length=MAX_BATCH)


class JugadaOut(BaseModel):
    id: str
    banca_id: str
    vendedor_id: str
    sorteo_id: str
    numeros: list[int]
    fecha_hora: datetime
    estado: EstadoJugada
    premio: float
    created_at: datetime | None
    updated_at: datetime | None
    banca_nombre: str | None = None
    vendedor_nombre: str | None = None
    sorteo_nombre: str | None = None

    @classmethod
    def from_domain(cls, j: Jugada) -> "JugadaOut":
        return cls(
            id=j.id,
            banca_id=j.banca_id,
            vendedor_id=j.vendedor_id,
            sorteo_id=j.sorteo_id,
            numeros=j.numeros,
            fecha_hora=j.fecha_hora,
            estado=EstadoJugada(j.estado),
            premio=float(j.premio),
            created_at=j.created_at,
            updated_at=j.updated_at,
            banca_nombre=j.banca_nombre,
            vendedor_nombre=j.vendedor_nombre,
            sorteo_nombre=j.sorteo_nombre,
        )
