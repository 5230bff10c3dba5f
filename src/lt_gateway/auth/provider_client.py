"""HTTP client for the Supabase GoTrue API (password login, signup, logout).

Only the operations the backend needs are wrapped. Token verification does
not go through here (see jwt_handler.py).

Endpoints used:
  POST   /auth/v1/token?grant_type=password   (anon key)
  POST   /auth/v1/admin/users                 (service-role key)
  DELETE /auth/v1/admin/users/{id}            (service-role key)
  POST   /auth/v1/logout                      (anon key + user token)
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from config.settings import settings
from src.lt_common.errors import (
    EmailExistsError,
    IdentityProviderError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)


@dataclass
class ProviderSession:
    access_token: str
    refresh_token: str
    token_type: str
    expires_in: int
    user_id: str
    email: str


class SupabaseAuthClient:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=settings.SUPABASE_URL,
            timeout=httpx.Timeout(settings.AUTH_HTTP_TIMEOUT_SECONDS),
            transport=self._transport,
        )

    async def _send(
        self, method: str, url: str, operation: str, **kwargs: Any
    ) -> httpx.Response:
        async with self._client() as client:
            try:
                return await client.request(method, url, **kwargs)
            except httpx.HTTPError as exc:
                logger.error("identity provider %s unreachable: %s", operation, exc)
                raise IdentityProviderError(f"{operation} -> {type(exc).__name__}") from exc

    @staticmethod
    def _anon_headers() -> dict[str, str]:
        return {"apikey": settings.SUPABASE_ANON_KEY}

    @staticmethod
    def _admin_headers() -> dict[str, str]:
        return {
            "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
            "Authorization": f"Bearer {settings.SUPABASE_SERVICE_ROLE_KEY}",
        }

    async def sign_in_with_password(self, email: str, password: str) -> ProviderSession:
        resp = await self._send(
            "POST",
            "/auth/v1/token",
            "sign_in",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._anon_headers(),
        )
        if resp.status_code in (400, 401):
            logger.warning("login rejected by provider email=%s", email)
            raise InvalidCredentialsError()
        _raise_for_unexpected(resp, "sign_in")

        body: dict[str, Any] = resp.json()
        user = body.get("user") or {}
        return ProviderSession(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token", ""),
            token_type=body.get("token_type", "bearer"),
            expires_in=int(body.get("expires_in", 3600)),
            user_id=str(user["id"]),
            email=user.get("email", email),
        )

    async def create_user(self, email: str, password: str, nombre: str) -> str:
        """Create a confirmed provider user and return its id."""
        resp = await self._send(
            "POST",
            "/auth/v1/admin/users",
            "create_user",
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"nombre": nombre},
            },
            headers=self._admin_headers(),
        )
        if resp.status_code in (409, 422):
            raise EmailExistsError()
        _raise_for_unexpected(resp, "create_user")
        return str(resp.json()["id"])

    async def delete_user(self, user_id: str) -> None:
        resp = await self._send(
            "DELETE",
            f"/auth/v1/admin/users/{user_id}",
            "delete_user",
            headers=self._admin_headers(),
        )
        _raise_for_unexpected(resp, "delete_user")

    async def sign_out(self, access_token: str) -> None:
        resp = await self._send(
            "POST",
            "/auth/v1/logout",
            "sign_out",
            headers={**self._anon_headers(), "Authorization": f"Bearer {access_token}"},
        )
        _raise_for_unexpected(resp, "sign_out")


def _raise_for_unexpected(resp: httpx.Response, operation: str) -> None:
    if resp.is_success:
        return
    logger.error(
        "identity provider %s failed status=%d body=%s",
        operation,
        resp.status_code,
        resp.text[:200],
    )
    raise IdentityProviderError(f"{operation} -> HTTP {resp.status_code}")
