"""Database connection management.

One async engine and session factory per process, created lazily from
settings and released by close_database().
"""
from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bim_ingest.shared.config import get_settings
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            echo=settings.database_echo,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory; sessions keep loaded rows usable after commit."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def init_database(create_schema: bool = False) -> None:
    """Check connectivity at startup.

    Args:
        create_schema: Create missing tables from the ORM metadata
            (local development; deployments run the Alembic migrations)
    """
    async with get_engine().begin() as conn:
        await conn.execute(text("SELECT 1"))
        if create_schema:
            from bim_ingest.infrastructure.database.models import Base

            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema created")

    logger.info("Database connection established")


async def close_database() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connection closed")
    _engine = None
    _session_factory = None
