"""Domain models for lt_vendedor — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Vendedor:
    id: str
    nombre: str
    cedula: str
    telefono: str | None
    estado: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
