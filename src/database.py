"""
Database configuration and session management.

Provides:
- Async database engine creation with proper configuration
- AsyncSessionLocal factory used by the local table gateways
- Schema create/drop utilities for development and tests
"""

import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.config import get_settings

logger = logging.getLogger(__name__)

# Get settings
settings = get_settings()


# Enable foreign key constraints for SQLite (cascade deletes depend on it)
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints in SQLite."""
    if "sqlite" not in type(dbapi_conn).__module__:
        return
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_async_database_url(sync_url: str) -> str:
    """Convert sync database URL to async URL."""
    if sync_url.startswith("sqlite:///"):
        # SQLite async uses aiosqlite
        return sync_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    elif sync_url.startswith("postgresql://"):
        # PostgreSQL async uses asyncpg
        return sync_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return sync_url


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine configured for the database type.

    In-memory SQLite databases use a StaticPool so every session shares the
    single underlying connection (and therefore the same data).
    """
    async_url = get_async_database_url(database_url)

    if "sqlite" in async_url:
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in async_url:
            kwargs["poolclass"] = StaticPool
        return create_async_engine(async_url, echo=echo, **kwargs)

    return create_async_engine(
        async_url,
        pool_size=5,  # Maximum number of connections in pool
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before using them
        echo=echo,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


# Create async engine
async_engine = create_engine_for_url(
    settings.database_url,
    echo=settings.log_level == "DEBUG",  # Log SQL statements in debug mode
)

# Async session factory
AsyncSessionLocal = create_session_factory(async_engine)


async def init_db(engine: AsyncEngine | None = None) -> None:
    """
    Initialize database by creating all tables.

    This is useful for development and testing. In production, use Alembic migrations.

    Note: This does not run migrations - use `alembic upgrade head` for that.
    """
    from src.models import Base

    logger.info("Creating database tables...")
    async with (engine or async_engine).begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all tables from the database.

    WARNING: This will delete all data. Use with caution.
    Primarily for testing and development.
    """
    from src.models import Base

    logger.warning("Dropping all database tables...")
    async with (engine or async_engine).begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
    logger.info("All database tables dropped")

