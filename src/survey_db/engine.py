"""Async SQLAlchemy engine and session factory.

One engine (and so one connection pool) per process, created on first use
from :func:`survey_db.config.load_db_settings`.  ``dispose_engine()`` closes
the pool on shutdown; the next ``get_engine()`` call builds a fresh one.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from survey_db.config import DatabaseSettings, load_db_settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Return the process-wide async engine, creating it on first call.

    ``settings`` is only consulted when the engine does not exist yet.
    """
    global _engine
    if _engine is None:
        settings = settings or load_db_settings()
        _engine = create_async_engine(
            settings.async_url,
            echo=settings.echo,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_recycle=settings.pool_recycle,
            # Long-lived chat sessions leave the pool idle between turns
            pool_pre_ping=True,
        )
        logger.info(
            "Database engine created (pool_size=%d, max_overflow=%d)",
            settings.pool_size, settings.max_overflow,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the ``AsyncSession`` factory bound to :func:`get_engine`.

    ``expire_on_commit=False`` keeps row attributes readable after the
    request's commit, when the response is serialised.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Close the connection pool (app shutdown)."""
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
