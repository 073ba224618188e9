"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the environment must be prepared
# before any subway module is imported
os.environ["DEBUG"] = "true"
os.environ["OTEL_ENABLED"] = "false"
os.environ["SECRET_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ALLOWED_ORIGINS"] = "http://localhost:3000"

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from subway.core.database import enable_sqlite_foreign_keys, get_db
from subway.main import app
from subway.models import Base, Line, Station

from tests.helpers.network import NetworkBuilder

pytest_plugins = ["tests.fixtures.otel"]


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession]:
    """
    Isolated in-memory SQLite database per test.

    StaticPool keeps the single in-memory connection alive so every session of
    the test sees the same schema and data. Foreign keys and session options
    match the application engine.

    Yields:
        Async SQLAlchemy session
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """
    FastAPI asynchronous HTTP client bound to the test database.

    Yields:
        Async HTTP client with ASGI transport
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def network(db_session: AsyncSession) -> NetworkBuilder:
    """Factory for stations and lines stored in the test database."""
    return NetworkBuilder(db_session)


@pytest.fixture
async def stations(network: NetworkBuilder) -> dict[str, Station]:
    """Five stored stations named A to E."""
    return await network.stations("A", "B", "C", "D", "E")


@pytest.fixture
async def line_a_c(network: NetworkBuilder, stations: dict[str, Station]) -> Line:
    """Stored line with a single section A -> C of distance 10."""
    return await network.line("green", [("A", "C", 10)], stations)
