"""
FastAPI application factory for the settlement API service.

Creates the app with:
- Admin routes (manual result entry, review queue)
- Scheduler trigger (one resolution pass per call)
- Middleware stack
- Health, readiness and status endpoints
- Lifespan management (connect Postgres/Redis, open provider clients)
"""
from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Union

from fastapi import FastAPI
from redis.exceptions import RedisError

from shared.config import get_settings
from shared.utils.database import DatabaseManager
from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import start_metrics_server
from shared.utils.redis_manager import RedisManager

from api.dependencies import get_db, get_redis, init_dependencies
from api.middleware import setup_middleware
from api.routes.cron import router as cron_router
from api.routes.forecasts import router as forecasts_router
from resolution.config import get_resolver_settings
from resolution.sources.registry import build_registry

logger = get_logger(__name__)

_CONNECT_RETRY_ATTEMPTS = 10
_CONNECT_RETRY_BASE_DELAY_S = 2.0


async def _connect_with_retry(connect_fn: Callable[[], Awaitable[None]], name: str) -> None:
    """Call async connect_fn(); retry with exponential backoff on failure."""
    for attempt in range(1, _CONNECT_RETRY_ATTEMPTS + 1):
        try:
            await connect_fn()
            return
        except (OSError, RedisError, ConnectionError) as exc:
            if attempt == _CONNECT_RETRY_ATTEMPTS:
                raise
            delay = _CONNECT_RETRY_BASE_DELAY_S * (2 ** (attempt - 1))
            logger.warning(
                "connect_retry",
                name=name,
                attempt=attempt,
                max_attempts=_CONNECT_RETRY_ATTEMPTS,
                delay_s=delay,
                error=str(exc),
            )
            await asyncio.sleep(delay)


@asynccontextmanager
async def _noop_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """No-op lifespan for testing without DB/Redis."""
    yield


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect infrastructure on startup; close provider clients and pools on shutdown."""
    settings = get_settings()
    setup_logging("api")
    start_metrics_server()

    redis = RedisManager(settings)
    db = DatabaseManager(settings)
    await _connect_with_retry(redis.connect, "Redis")
    await _connect_with_retry(db.connect, "Database")

    registry = build_registry(get_resolver_settings())
    await registry.start()

    init_dependencies(redis, db, registry)
    logger.info("api_service_started", host=settings.api_host, port=settings.api_port)

    yield

    await registry.close()
    await db.disconnect()
    await redis.disconnect()
    logger.info("api_service_stopped")


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application. Set use_lifespan=False for testing without DB/Redis."""
    app = FastAPI(
        title="Match Settlement API",
        description="Forecast resolution and settlement",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else _noop_lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    setup_middleware(app)

    app.include_router(forecasts_router)
    app.include_router(cron_router)

    @app.get("/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": "api"}

    @app.get("/ready", tags=["system"])
    async def readiness() -> Dict[str, Union[str, bool]]:
        """Readiness probe: checks Postgres and Redis."""
        redis = get_redis()
        db = get_db()

        redis_ok = False
        try:
            await redis.client.ping()
            redis_ok = True
        except (RedisError, OSError) as exc:
            logger.warning("redis_ping_failed", error=str(exc))

        db_ok = await db.ping()
        return {
            "status": "ok" if (redis_ok and db_ok) else "degraded",
            "redis": redis_ok,
            "database": db_ok,
        }

    @app.get("/v1/status", tags=["system"])
    async def system_status() -> dict[str, Any]:
        """Summary of the most recent resolution pass, if any."""
        redis = get_redis()
        last_pass: Any = None
        try:
            raw = await redis.get_last_pass()
            last_pass = json.loads(raw) if raw else None
        except (RedisError, ValueError) as exc:
            logger.warning("last_pass_unavailable", error=str(exc))
        return {"status": "ok", "last_pass": last_pass}

    return app


# For running with uvicorn directly
app = create_app()
