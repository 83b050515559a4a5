"""Database dependency injection for FastAPI.

Provides the application engine and session factory with connection
pooling. Request handlers never open sessions directly: they receive a
tenant-scoped session bound to the caller's AuthContext.
"""

from __future__ import annotations

import threading

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_write_engine
from infrastructure.database.exceptions import DatabaseConnectionError
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Module-level engine instance (created on first use)
_write_engine: AsyncEngine | None = None

# Module-level sessionmaker instance (created with the engine)
_write_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_write_engine() -> AsyncEngine:
    """Get the database engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.
    Also creates and caches the sessionmaker for efficient session creation.

    Returns:
        Configured async engine
    """
    global _write_engine, _write_sessionmaker
    if _write_engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _write_engine is None:
                settings = get_database_settings()
                _write_engine = create_write_engine(settings)
                _write_sessionmaker = async_sessionmaker(
                    _write_engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
    return _write_engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory (FastAPI dependency).

    Returns:
        The cached async_sessionmaker bound to the application engine
    """
    get_write_engine()
    assert _write_sessionmaker is not None
    return _write_sessionmaker


async def check_database_connection() -> None:
    """Verify that the database answers a trivial query.

    Raises:
        DatabaseConnectionError: If the database cannot be reached
    """
    settings = get_database_settings()
    try:
        async with get_write_engine().connect() as connection:
            await connection.execute(text("SELECT 1"))
    except Exception as e:
        _probe.connection_failed(
            host=settings.host, database=settings.database, error=e
        )
        raise DatabaseConnectionError(str(e)) from e
    _probe.connection_established(host=settings.host, database=settings.database)


async def close_database_connections() -> None:
    """Close all database engine connections.

    Should be called on application shutdown to properly cleanup connections.
    Also resets the sessionmaker to allow reinitialization.
    """
    global _write_engine, _write_sessionmaker

    if _write_engine is not None:
        await _write_engine.dispose()
        _probe.pool_closed()
        _write_engine = None
        _write_sessionmaker = None
