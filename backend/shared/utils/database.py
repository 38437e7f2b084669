"""
Async PostgreSQL access for the forecast store (SQLAlchemy 2.0 + asyncpg).
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shared.config import Settings, get_settings
from shared.models.orm import Base
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """Owns the async engine; hands out short-lived sessions per store call."""

    def __init__(self, settings: Settings | None = None, url: str | None = None) -> None:
        self._settings = settings or get_settings()
        # url overrides the configured Postgres DSN (tests use sqlite+aiosqlite)
        self._url = url or self._settings.database_url_str
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    def _engine_options(self) -> dict[str, Any]:
        s = self._settings
        options: dict[str, Any] = {"echo": s.debug}
        if make_url(self._url).get_backend_name() != "postgresql":
            return options
        options.update(
            pool_size=s.db_pool_min,
            max_overflow=max(0, s.db_pool_max - s.db_pool_min),
            pool_pre_ping=True,
            pool_recycle=300,
            connect_args={"timeout": s.db_command_timeout, "command_timeout": s.db_command_timeout},
        )
        return options

    async def connect(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_async_engine(self._url, **self._engine_options())
        self._sessions = async_sessionmaker(bind=self._engine, class_=AsyncSession, expire_on_commit=False)
        logger.info("database_connected", url=self._safe_url())

    def _safe_url(self) -> str:
        if self._url == self._settings.database_url_str:
            return self._settings.database_url_safe_log
        return make_url(self._url).render_as_string(hide_password=True)

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("database_disconnected")

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseManager not connected; call connect() first")
        return self._engine

    async def create_schema(self) -> None:
        """Create missing tables and indexes from the ORM metadata. Existing tables are untouched."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_ready", tables=sorted(Base.metadata.tables))

    async def ping(self) -> bool:
        """Readiness check: one trivial round trip."""
        try:
            async with self.read_session() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError, RuntimeError) as exc:
            logger.warning("database_ping_failed", error=str(exc))
            return False
        return True

    def _factory(self) -> async_sessionmaker[AsyncSession]:
        if self._sessions is None:
            raise RuntimeError("DatabaseManager not connected; call connect() first")
        return self._sessions

    @asynccontextmanager
    async def read_session(self) -> AsyncIterator[AsyncSession]:
        async with self._factory()() as session:
            yield session

    @asynccontextmanager
    async def write_session(self) -> AsyncIterator[AsyncSession]:
        """Commits when the block exits cleanly, rolls back and re-raises otherwise."""
        async with self._factory()() as session:
            async with session.begin():
                yield session
