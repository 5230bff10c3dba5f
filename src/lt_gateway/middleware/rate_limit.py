"""Rate limiting middleware — fixed window per client IP in Redis.

Rule: at most RATE_LIMIT_MAX requests per RATE_LIMIT_WINDOW_MS per IP,
across all endpoints except /health.

Redis logic:
    key   = "ratelimit:{ip}:{window_index}"
    count = INCR key
    if count == 1: PEXPIRE key window_ms
    if count > limit: 429 + Retry-After

The 429 is returned from here directly: exceptions raised inside a
BaseHTTPMiddleware never reach the app's exception handlers.
"""

import math
import time
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.lt_common.errors import RateLimitError
from src.lt_common.redis_client import get_redis
from src.lt_common.response import error_response
from src.lt_gateway.security.client_ip import client_ip

_EXEMPT_PATHS = frozenset({"/health"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
    ) -> None:
        super().__init__(app)
        self._redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        window_ms = settings.RATE_LIMIT_WINDOW_MS
        now_ms = int(time.time() * 1000)
        window_index = now_ms // window_ms
        key = f"ratelimit:{client_ip(request)}:{window_index}"

        redis = await self._redis_factory()
        count = await redis.incr(key)
        if count == 1:
            await redis.pexpire(key, window_ms)

        if count > settings.RATE_LIMIT_MAX:
            retry_after_ms = (window_index + 1) * window_ms - now_ms
            err = RateLimitError()
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.message).model_dump(),
                headers={"Retry-After": str(max(1, math.ceil(retry_after_ms / 1000)))},
            )
        return await call_next(request)
