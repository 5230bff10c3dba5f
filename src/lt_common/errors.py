"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Banca
  3xxx: Vendedor
  4xxx: Jugada
  9xxx: System

The HTTP layer only maps ``http_status``; it never inspects anything else.
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- Families (one per HTTP status) ---

class ValidationError(AppError):
    """Malformed or missing input. ``details`` lists every offending field."""

    def __init__(
        self,
        message: str = "Validation error",
        details: list[dict[str, Any]] | None = None,
        code: int = 9003,
    ) -> None:
        super().__init__(code, message, 400)
        self.details = details


class InvalidStateError(AppError):
    """The request is well formed but the entities involved forbid it."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 400)


class AuthenticationError(AppError):
    def __init__(self, message: str = "Token requerido", code: int = 1001) -> None:
        super().__init__(code, message, 401)


class AuthorizationError(AppError):
    def __init__(self, message: str = "No autorizado", code: int = 1002) -> None:
        super().__init__(code, message, 403)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ConflictError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Credenciales inválidas", 1003)


class UserInactiveError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Usuario inactivo", 1004)


class EmailExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1005, "Ya existe un usuario con ese email")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1006, f"Usuario no encontrado: {user_id}")


class IdentityProviderError(AppError):
    """The identity provider answered with something other than a rejection."""

    def __init__(self, detail: str) -> None:
        super().__init__(1007, f"Error del proveedor de identidad: {detail}", 502)


# --- 2xxx: Banca ---

class BancaNotFoundError(NotFoundError):
    def __init__(self, banca_id: str) -> None:
        super().__init__(2001, f"Banca no encontrada: {banca_id}")


class BancaNameExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(2002, "Ya existe una banca con ese nombre")


class IpNotAllowedError(AuthorizationError):
    def __init__(self, client_ip: str) -> None:
        super().__init__(f"IP {client_ip} no autorizada para esta banca", 2003)


class GeofenceError(AuthorizationError):
    def __init__(self, country: str) -> None:
        super().__init__(f"Acceso no permitido desde {country}", 2004)


# --- 3xxx: Vendedor ---

class VendedorNotFoundError(NotFoundError):
    def __init__(self, vendedor_id: str) -> None:
        super().__init__(3001, f"Vendedor no encontrado: {vendedor_id}")


class CedulaExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(3002, "Ya existe un vendedor con esa cédula")


# --- 4xxx: Jugada ---

class JugadaNotFoundError(NotFoundError):
    def __init__(self, jugada_id: str) -> None:
        super().__init__(4001, f"Jugada no encontrada: {jugada_id}")


class BancaUnavailableError(InvalidStateError):
    def __init__(self, message: str) -> None:
        super().__init__(4002, message)


class VendedorUnavailableError(InvalidStateError):
    def __init__(self, message: str) -> None:
        super().__init__(4003, message)


class VendedorNotAssignedError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__(4004, "El vendedor no está asignado a esta banca")


class JugadaAlreadyCancelledError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__(4005, "La jugada ya está anulada")


class CancellationWindowExpiredError(InvalidStateError):
    def __init__(self, grace_minutes: int) -> None:
        super().__init__(
            4006, f"No se puede anular la jugada después de {grace_minutes} minutos"
        )


class ResultAlreadyPublishedError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__(
            4007, "No se puede anular la jugada porque el resultado ya fue publicado"
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(
            9001, "Too many requests from this IP, please try again later.", 429
        )

