# ABOUTME: Async engine and per-operation sessions for the watermark and subscriber tables.
# ABOUTME: Sessions are short-lived so concurrent WFO tasks never share one.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from foul_weather.config import get_settings

log = structlog.get_logger()

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the process-wide async engine.

    Connections sit idle between scheduler runs, so they are pinged on checkout.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            pool_pre_ping=True,
        )
        log.debug("db_engine_created", host=settings.db_host, database=settings.db_name)
    return _engine


def _session_maker() -> async_sessionmaker[AsyncSession]:
    global _sessions
    if _sessions is None:
        _sessions = async_sessionmaker(get_engine(), expire_on_commit=False, autoflush=False)
    return _sessions


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Open one session, commit on success and roll back on error."""
    async with _session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """Dispose of the engine at process or app shutdown."""
    global _engine, _sessions
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _sessions = None
    log.debug("db_engine_disposed")
