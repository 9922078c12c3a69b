"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.sb_admin.api.router import router as admin_router
from src.sb_bet.api.router import router as bet_router
from src.sb_common.database import engine
from src.sb_common.enums import ErrorKind
from src.sb_common.errors import AppError
from src.sb_common.redis_client import close_redis, ping_redis
from src.sb_common.response import error_response
from src.sb_gateway.middleware.request_log import RequestLogMiddleware
from src.sb_invite.api.router import router as invite_router
from src.sb_ledger.api.router import router as wallet_router
from src.sb_stake.api.router import router as stake_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if not await ping_redis():
        logger.warning("Redis unreachable at startup; balance cache and events are degraded")
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.warning("%s %s failed: [%d] %s", request.method, request.url.path, exc.code, exc.message)
    resp = error_response(exc.code, exc.message, exc.kind.value)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()))
    resp = error_response(
        9001, f"Invalid request: {location} {first.get('msg', '')}".strip(), ErrorKind.VALIDATION.value
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=422, content=resp.model_dump())


app.include_router(wallet_router, prefix="/api/v1")
app.include_router(bet_router, prefix="/api/v1")
app.include_router(stake_router, prefix="/api/v1")
app.include_router(invite_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    # Redis is optional: a down Redis degrades caching but the service stays live.
    redis_state = "up" if await ping_redis() else "down"
    return {"status": "ok", "version": "0.1.0", "redis": redis_state}
