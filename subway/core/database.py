"""Database engine, session factory and the request session dependency."""

import threading
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from subway.core.config import settings

# Built on first use so forked uvicorn workers never share the parent's loop
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_lock = threading.Lock()


def _engine_options(url: str) -> dict[str, Any]:
    """
    Keyword arguments for create_async_engine.

    DEBUG and SQLite engines open a fresh connection per checkout; pool sizing
    only applies to server databases.
    """
    options: dict[str, Any] = {"echo": settings.DATABASE_ECHO}
    if settings.DEBUG or make_url(url).get_backend_name() == "sqlite":
        options["poolclass"] = NullPool
    else:
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
        options["pool_pre_ping"] = True
    return options


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite leaves FOREIGN KEY enforcement off unless asked per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine() -> AsyncEngine:
    """
    Get or create the process-wide async engine.

    Returns:
        AsyncEngine: SQLAlchemy async engine
    """
    global _engine  # noqa: PLW0603
    if _engine is None:
        with _lock:
            if _engine is None:
                engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
                if engine.dialect.name == "sqlite":
                    enable_sqlite_foreign_keys(engine)
                _engine = engine
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get or create the session factory bound to get_engine().

    Sessions keep loaded rows usable after commit so services can build
    responses from the line they just saved.
    """
    global _session_factory  # noqa: PLW0603
    if _session_factory is None:
        engine = get_engine()
        with _lock:
            if _session_factory is None:
                _session_factory = async_sessionmaker(
                    engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                    autoflush=False,
                )
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine so the next use rebuilds it."""
    global _engine, _session_factory  # noqa: PLW0603
    with _lock:
        engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession]:
    """
    Dependency for getting async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with get_session_factory()() as session:
        yield session
