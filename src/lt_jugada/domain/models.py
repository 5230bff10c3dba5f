"""Domain models for lt_jugada — pure dataclasses, no business logic."""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass
class NuevaJugada:
    """Validated input for one wager, before any precondition is checked."""

    banca_id: str
    vendedor_id: str
    sorteo_id: str
    numeros: list[int]


@dataclass
class Jugada:
    id: str
    banca_id: str
    vendedor_id: str
    sorteo_id: str
    numeros: list[int]
    fecha_hora: datetime
    estado: str
    premio: Decimal = Decimal("0")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Display names, filled only by the read queries that join them.
    banca_nombre: str | None = None
    vendedor_nombre: str | None = None
    sorteo_nombre: str | None = None


@dataclass
class Resultado:
    sorteo_id: str
    fecha: date
    publicado: bool


@dataclass(frozen=True)
class JugadaFilters:
    fecha_desde: datetime | None = None
    fecha_hasta: datetime | None = None
    banca_id: str | None = None
    vendedor_id: str | None = None
    sorteo_id: str | None = None
    estado: str | None = None
    numero: int | None = None

    def as_params(self) -> dict[str, object]:
        return asdict(self)
