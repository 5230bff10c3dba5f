"""FastAPI dependencies: get_current_principal and require_roles.

Usage in any protected router:
    from src.lt_gateway.auth.dependencies import require_roles
    from src.lt_gateway.auth.policy import ADMIN_ONLY

    @router.post("")
    async def create(principal: Principal = Depends(require_roles(ADMIN_ONLY))):
        ...

require_roles() depends on get_current_principal, so FastAPI always resolves
the identity (401) before evaluating the role (403).
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.database import async_session_factory
from src.lt_common.enums import Role
from src.lt_gateway.auth.identity import IdentityResolver
from src.lt_gateway.auth.policy import authorize
from src.lt_gateway.auth.principal import Principal

# Only registers the "Authorize" button in Swagger UI; the raw header is
# parsed by IdentityResolver so malformed values still produce our 401.
bearer_scheme = HTTPBearer(auto_error=False)

_resolver = IdentityResolver()


def get_identity_resolver() -> IdentityResolver:
    return _resolver


def get_identity_session_factory() -> Callable[[], AsyncSession]:
    """Factory for the short-lived usuarios lookup session.

    The session is closed before the handler runs, so a request never holds
    more than one pooled connection at a time.
    """
    return async_session_factory


async def get_current_principal(
    request: Request,
    _credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    resolver: Annotated[IdentityResolver, Depends(get_identity_resolver)],
    session_factory: Annotated[
        Callable[[], AsyncSession], Depends(get_identity_session_factory)
    ],
) -> Principal:
    async with session_factory() as db:
        principal = await resolver.resolve(request.headers.get("Authorization"), db)
    request.state.principal_id = principal.id
    return principal


def require_roles(
    required: frozenset[Role],
) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency that authenticates, then checks ``required``."""

    async def _dependency(
        principal: Annotated[Principal, Depends(get_current_principal)],
    ) -> Principal:
        authorize(principal, required)
        return principal

    return _dependency
