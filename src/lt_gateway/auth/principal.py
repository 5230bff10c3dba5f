"""The authenticated caller, as seen by every handler after identity resolution."""

from dataclasses import dataclass

from src.lt_common.enums import EstadoUsuario, Role


@dataclass(frozen=True)
class Principal:
    id: str
    email: str
    role: Role
    estado: EstadoUsuario
