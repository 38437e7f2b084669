"""
Dependency injection for the API service.
Provides the store, resolution engine and infrastructure handles to route handlers.
"""
from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from shared.config import Settings, get_settings
from shared.utils.database import DatabaseManager
from shared.utils.redis_manager import RedisManager

from resolution.config import get_resolver_settings
from resolution.engine import ResolutionEngine
from resolution.settlement import SettlementEngine
from resolution.sources.registry import SourceRegistry
from resolution.store import ForecastStore

# Module-level singletons, initialized at startup
_redis: RedisManager | None = None
_db: DatabaseManager | None = None
_registry: SourceRegistry | None = None


def init_dependencies(redis: RedisManager, db: DatabaseManager, registry: SourceRegistry) -> None:
    """Initialize module-level singletons. Called once at startup."""
    global _redis, _db, _registry
    _redis = redis
    _db = db
    _registry = registry


def get_redis() -> RedisManager:
    """FastAPI dependency: returns the shared RedisManager."""
    if _redis is None:
        raise RuntimeError("RedisManager not initialized; call init_dependencies first")
    return _redis


def get_db() -> DatabaseManager:
    """FastAPI dependency: returns the shared DatabaseManager."""
    if _db is None:
        raise RuntimeError("DatabaseManager not initialized; call init_dependencies first")
    return _db


def get_registry() -> SourceRegistry:
    if _registry is None:
        raise RuntimeError("SourceRegistry not initialized; call init_dependencies first")
    return _registry


def get_store(db: DatabaseManager = Depends(get_db)) -> ForecastStore:
    return ForecastStore(db)


def get_settlement_engine() -> SettlementEngine:
    return SettlementEngine()


def get_engine(
    store: ForecastStore = Depends(get_store),
    registry: SourceRegistry = Depends(get_registry),
    redis: RedisManager = Depends(get_redis),
) -> ResolutionEngine:
    settings = get_settings()
    return ResolutionEngine(
        store,
        registry,
        redis=redis,
        settings=get_resolver_settings(),
        owner_id=settings.instance_id or None,
    )


def require_cron_secret(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Bearer check for the scheduler trigger; disabled when MS_CRON_SECRET is empty."""
    secret = settings.cron_secret
    if not secret:
        return
    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid cron secret")
