"""Domain models for lt_banca — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Banca:
    id: str
    nombre: str
    ubicacion: str | None
    estado: str
    ip_whitelist: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
