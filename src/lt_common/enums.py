"""Global enums — must match DB CHECK constraints exactly.

Values are the Spanish wire/DB literals; member names are what code reads.
"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    OPERADOR = "operador"


class EstadoUsuario(str, Enum):
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class EstadoBanca(str, Enum):
    ACTIVA = "activa"
    INACTIVA = "inactiva"


class EstadoVendedor(str, Enum):
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class EstadoJugada(str, Enum):
    """Valid → Anulada is the only transition; Anulada is terminal."""

    VALIDA = "valida"
    ANULADA = "anulada"
