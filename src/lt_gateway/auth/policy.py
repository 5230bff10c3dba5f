"""Role allow-lists and the authorize() check.

Policies are static frozensets: no role inheritance, no wildcards. Adding a
role to Role means deciding, for every set below, whether it belongs there.
"""

from src.lt_common.enums import Role
from src.lt_common.errors import AuthenticationError, AuthorizationError
from src.lt_gateway.auth.principal import Principal

ADMIN_ONLY: frozenset[Role] = frozenset({Role.ADMIN})
ADMIN_OR_SUPERVISOR: frozenset[Role] = frozenset({Role.ADMIN, Role.SUPERVISOR})
ANY_ROLE: frozenset[Role] = frozenset(Role)


def authorize(principal: Principal | None, required: frozenset[Role]) -> None:
    """Raise unless ``principal`` holds one of ``required``.

    A missing principal is an authentication failure (401), never 403.
    """
    if principal is None:
        raise AuthenticationError("Usuario no autenticado")
    if principal.role not in required:
        raise AuthorizationError(
            f"Rol {principal.role.value} no autorizado para esta acción"
        )
