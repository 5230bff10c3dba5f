"""Verification of access tokens issued by the identity provider.

Supabase GoTrue signs its access tokens with the project JWT secret (HS256)
and sets ``aud = "authenticated"``. We only verify; tokens are never issued
by this service, so there is no create_* counterpart here.

MVP NOTE: verification is local (signature + exp + aud). A session revoked
through /auth/logout stays usable until its ``exp``; the provider keeps
access tokens short-lived (1h by default).
"""

from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.lt_common.errors import AuthenticationError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate a provider access token.

    Returns:
        Decoded claims with at minimum {"sub": ..., "aud": ..., "exp": ...}.

    Raises:
        AuthenticationError: signature, expiry or audience check failed, or
            the token carries no subject.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError:
        raise AuthenticationError("Token inválido") from None

    if not payload.get("sub"):
        raise AuthenticationError("Token inválido")
    return payload
