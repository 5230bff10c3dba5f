"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8080
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.lt_banca.api.router import router as banca_router
from src.lt_common.database import engine
from src.lt_common.errors import AppError, ValidationError
from src.lt_common.logging_config import configure_logging
from src.lt_common.redis_client import close_redis, get_redis
from src.lt_common.response import error_response
from src.lt_gateway.api.router import router as auth_router
from src.lt_gateway.middleware.rate_limit import RateLimitMiddleware
from src.lt_gateway.middleware.request_log import RequestLogMiddleware
from src.lt_gateway.middleware.security_headers import SecurityHeadersMiddleware
from src.lt_jugada.api.router import router as jugada_router
from src.lt_vendedor.api.router import router as vendedor_router

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (+ Redis when rate limiting). Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.RATE_LIMIT_ENABLED:
        await get_redis()
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Last added runs first: request log wraps rate limit, security headers wrap
# both (429s included), CORS wraps everything.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_LOC_SOURCES = frozenset({"body", "query", "path", "header"})


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    details = exc.details if isinstance(exc, ValidationError) else None
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        "[%s] %s failed code=%d status=%d: %s %s",
        request.method,
        request.url.path,
        exc.code,
        exc.http_status,
        exc.message,
        _request_id(request),
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=error_response(exc.message, details).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part not in _LOC_SOURCES),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        "[%s] %s validation error %s %s",
        request.method,
        request.url.path,
        details,
        _request_id(request),
    )
    return JSONResponse(
        status_code=400,
        content=error_response("Validation error", details).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "[%s] %s unhandled error %s", request.method, request.url.path, _request_id(request)
    )
    return JSONResponse(
        status_code=500,
        content=error_response("Internal server error").model_dump(),
    )


app.include_router(auth_router)
app.include_router(banca_router)
app.include_router(vendedor_router)
app.include_router(jugada_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": settings.APP_VERSION}


def run() -> None:
    import uvicorn

    uvicorn.run("src.main:app", host="0.0.0.0", port=settings.PORT)
