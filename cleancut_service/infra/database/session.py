"""Database session management for the async SQLAlchemy engine."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from cleancut_service.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it on first use."""
    global _engine

    if _engine is None:
        db_settings = get_db_settings()
        engine_kwargs: dict[str, Any] = {
            "echo": db_settings.echo or get_app_settings().debug,
            "pool_pre_ping": db_settings.pool_pre_ping,
        }
        if not db_settings.is_sqlite:
            engine_kwargs.update(
                pool_size=db_settings.pool_size,
                max_overflow=db_settings.max_overflow,
                pool_timeout=db_settings.pool_timeout,
                pool_recycle=db_settings.pool_recycle,
            )
        _engine = create_async_engine(db_settings.database_url, **engine_kwargs)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to the process-wide engine."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session for CLI commands and scheduled jobs.

    Example:
        async with get_async_session() as session:
            summary = await sweeper.sweep_expired(session)
            await session.commit()
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_database() -> None:
    """Verify connectivity and create missing tables when enabled."""
    from cleancut_service.core.database import Base

    # Registers every model on Base.metadata
    import cleancut_service.features.models  # noqa: F401

    db_settings = get_db_settings()
    engine = get_engine()
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if db_settings.create_tables:
                await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error(
            "Failed to initialize database",
            extra={"driver": engine.dialect.driver, "error": str(e)},
        )
        raise

    logger.info(
        "Database initialized",
        extra={"driver": engine.dialect.driver, "create_tables": db_settings.create_tables},
    )


async def close_database() -> None:
    """Dispose the engine and its pooled connections."""
    global _engine, _session_factory

    if _engine is None:
        return
    logger.info("Closing database connection")
    await _engine.dispose()
    _engine = None
    _session_factory = None
