"""
Database connection management
"""

import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import get_database_url, settings
from ..dbmodels import Base
from ..logging import get_logger

logger = get_logger(__name__)

# Shared connection pool for the process
_async_engine: AsyncEngine | None = None
_async_session_local: async_sessionmaker[AsyncSession] | None = None
_initialized = False
_init_lock = threading.Lock()  # Protect initialization from race conditions


def to_async_url(db_url: str) -> str:
    """Rewrite a plain database URL to use its asyncio driver."""
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if db_url.startswith("sqlite://"):
        return db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return db_url


def create_engine_for(db_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    async_url = to_async_url(db_url)
    if async_url.startswith("sqlite"):
        return create_async_engine(async_url, echo=echo)
    return create_async_engine(
        async_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=echo,
    )


def reset_database() -> None:
    """Forget the shared engine without disposing it (for tests)."""
    global _async_engine, _async_session_local, _initialized
    _async_engine = None
    _async_session_local = None
    _initialized = False


async def close_database() -> None:
    """Dispose the shared engine and release pooled connections."""
    engine = _async_engine
    reset_database()
    if engine is not None:
        await engine.dispose()
        logger.info("Database connections closed")


async def check_database_connection() -> tuple[bool, str | None]:
    """
    Test the database connection and return helpful error messages.

    Returns:
        tuple: (success: bool, error_message: str | None)
    """
    if _async_engine is None:
        return False, "Database engine not initialized"

    try:
        async with _async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            return True, None
    except Exception as e:
        error_str = str(e)
        error_type = type(e).__name__

        if "Connection refused" in error_str or "could not connect" in error_str:
            return False, (
                f"Cannot connect to database server: {error_str}\n"
                f"The database server appears to be down or unreachable."
            )
        elif "password authentication failed" in error_str:
            return False, (
                f"Database authentication failed: {error_str}\n"
                f"Please check your database credentials."
            )
        else:
            return False, f"Database connection error ({error_type}): {error_str}"


def init_database(database_url: str | None = None, force_reinit: bool = False) -> None:
    """Initialize the shared database connection pool.

    Thread-safe initialization using a lock to prevent race conditions
    when multiple threads attempt to initialize simultaneously.
    """
    global _async_engine, _async_session_local, _initialized

    if _initialized and not force_reinit and database_url is None:
        return

    with _init_lock:
        if _initialized and not force_reinit and database_url is None:
            return

        db_url = database_url or get_database_url()

        _async_engine = create_engine_for(db_url, echo=settings.sql_echo)
        _async_session_local = async_sessionmaker(
            _async_engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

        _initialized = True
        logger.info("Database initialized", driver=_async_engine.url.drivername)


def get_async_engine() -> AsyncEngine:
    """Get the shared async SQLAlchemy engine."""
    if _async_engine is None:
        init_database()
    assert _async_engine is not None
    return _async_engine


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create any missing tables."""
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session that commits on success and rolls back on error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session (async) from the shared pool."""
    if _async_session_local is None:
        init_database()

    if _async_session_local is None:
        raise RuntimeError("Database not initialized")

    async with session_scope(_async_session_local) as session:
        yield session
