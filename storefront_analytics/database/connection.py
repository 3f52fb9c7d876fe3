"""
Database Connection Management

One async SQLAlchemy engine per process over the storefront database.
Analytics requests only read, so their sessions are rolled back when the
request ends; seeding writes through `get_db()`, which commits.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from storefront_analytics.config import get_settings
from storefront_analytics.database.models import Base

logger = structlog.get_logger(__name__)
settings = get_settings()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


async def init_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and verify the database answers.

    Args:
        url: Async database URL; defaults to the configured one

    Returns:
        The process-wide AsyncEngine
    """
    global _engine, _session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    # asyncpg keeps its own connections; no SQLAlchemy pool on top
    _engine = create_async_engine(
        url or settings.database.async_url,
        echo=settings.database.echo,
        pool_pre_ping=True,
        poolclass=NullPool,
    )
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        await close_database()
        raise

    logger.info(
        "Database connection established",
        host=settings.database.host,
        database=settings.database.db,
    )
    return _engine


async def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is None:
        return

    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database engine disposed")


def get_engine() -> AsyncEngine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _engine


def _new_session() -> AsyncSession:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _session_factory()


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Writable session: commits on success, rolls back on error.

    Example:
        async with get_db() as db:
            db.add_all(rows)
    """
    session = _new_session()
    try:
        yield session
        await session.commit()
    except Exception as e:
        logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_read_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a read-only session.

    Nothing the analytics engine does is ever committed. Without an engine
    the session is unbound: request parameters are still validated and the
    first query fails inside the analytics service, which reports it as a
    data fetch error.

    Example:
        @router.get("/overview")
        async def overview(db: AsyncSession = Depends(get_read_session)):
            ...
    """
    if _session_factory is None:
        logger.warning("Database not initialized, analytics queries will fail")
        session = AsyncSession()
    else:
        session = _session_factory()
    try:
        yield session
    finally:
        await session.rollback()
        await session.close()


async def create_tables() -> None:
    """Create any storefront tables that do not exist yet"""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Storefront tables ensured", tables=sorted(Base.metadata.tables))


async def check_database_health() -> Dict[str, Any]:
    """
    Round-trip a trivial query.

    Returns:
        {"status": "healthy", "latency_ms": ...} or {"status": "unhealthy", "error": ...}
    """
    start = time.perf_counter()
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - start) * 1000, 2),
    }
