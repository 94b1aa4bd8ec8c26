"""
Database session management.
"""
# fieldops/db/session.py
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fieldops.core.config import settings
from fieldops.db.base import Base

logger = logging.getLogger("fieldops.db")


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool settings; SQLite (used in tests) has no connection pool to tune."""
    options: Dict[str, Any] = {"echo": settings.DEBUG}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=20,
            max_overflow=30,
            pool_timeout=30,
            pool_recycle=3600,
            pool_pre_ping=True,
        )
    return options


# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create async session factory
async_session_factory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


# Context manager for database sessions
@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions.

    Automatically handles commit/rollback and ensures session is closed.

    Usage:
        async with get_session() as session:
            # Use session here
    """
    session = async_session_factory()
    try:
        yield session
        await session.commit()
        logger.debug("Database session committed")
    except Exception as e:
        await session.rollback()
        logger.error(f"Database session rolled back due to: {str(e)}")
        raise
    finally:
        await session.close()
        logger.debug("Database session closed")


# Dependency function for FastAPI endpoints
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session for FastAPI endpoints via dependency injection.
    """
    async with get_session() as session:
        yield session


async def create_tables() -> None:
    """Create any missing tables (development databases and tests)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def initialize_database() -> None:
    """
    Check the database connection during application startup.
    """
    logger.info("Initializing database connection pool")

    async with get_session() as session:
        try:
            await session.execute(text("SELECT 1"))
            logger.info("Database connection successful")
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            raise

    if settings.DEBUG:
        await create_tables()

    logger.info("Database initialization complete")


async def close_database_connections() -> None:
    """
    Close all database connections in the pool.

    This should be called during application shutdown.
    """
    logger.info("Closing database connections")
    await engine.dispose()
    logger.info("Database connections closed")
