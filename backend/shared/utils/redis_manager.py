"""
Redis connection manager for the settlement services.
Provides the async connection pool and per-forecast lease helpers.
"""
from __future__ import annotations

from typing import Any, Optional

import redis.asyncio as aioredis
from redis.asyncio import Redis

from shared.config import Settings, get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Key namespaces ──────────────────────────────────────────────────────
LEASE_KEY = "lease:forecast:{forecast_id}"
LAST_PASS_KEY = "resolver:last_pass"


def _fmt(template: str, **kwargs: Any) -> str:
    return template.format(**kwargs)


class RedisManager:
    """Manages async Redis connection pool and provides typed helpers."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._pool: Optional[Redis] = None

    async def connect(self) -> None:
        """Initialize the connection pool."""
        self._pool = aioredis.from_url(
            self._settings.redis_url_str,
            max_connections=self._settings.redis_max_connections,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
            retry_on_timeout=True,
        )
        await self._pool.ping()
        logger.info("redis_connected", url=self._settings.redis_url_str)

    async def disconnect(self) -> None:
        """Graceful shutdown."""
        if self._pool:
            await self._pool.aclose()
            logger.info("redis_disconnected")

    @property
    def client(self) -> Redis:
        if self._pool is None:
            raise RuntimeError("RedisManager not connected. Call connect() first.")
        return self._pool

    # ── Forecast leases ─────────────────────────────────────────────────

    # Lua script: atomically delete only if we hold the lease
    _RELEASE_LEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    redis.call("del", KEYS[1])
    return 1
end
return 0
"""

    async def try_acquire_lease(self, forecast_id: str, owner: str, ttl_s: int = 120) -> bool:
        """Claim a forecast for processing using SET NX. False if another run holds it."""
        key = _fmt(LEASE_KEY, forecast_id=forecast_id)
        acquired = await self.client.set(key, owner, nx=True, ex=ttl_s)
        return bool(acquired)

    async def release_lease(self, forecast_id: str, owner: str) -> bool:
        """Atomically release the lease only if we still hold it."""
        key = _fmt(LEASE_KEY, forecast_id=forecast_id)
        result = await self.client.eval(self._RELEASE_LEASE_SCRIPT, 1, key, owner)
        return bool(result)

    async def record_pass(self, summary_json: str, ttl_s: int = 86400) -> None:
        """Keep the last pass summary around for the status endpoint."""
        await self.client.set(LAST_PASS_KEY, summary_json, ex=ttl_s)

    async def get_last_pass(self) -> Optional[str]:
        return await self.client.get(LAST_PASS_KEY)
