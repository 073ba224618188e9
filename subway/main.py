"""FastAPI application: routers, middleware, probes and startup checks."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from alembic import script
from alembic.config import Config
from alembic.runtime import migration
from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from subway import __version__
from subway.api import lines, stations
from subway.core.config import settings
from subway.core.database import dispose_engine, get_engine
from subway.core.logging import configure_logging
from subway.core.telemetry import get_tracer_provider, shutdown_tracer_provider
from subway.middleware import AccessLoggingMiddleware

# Before uvicorn logs anything, so its startup lines are structured too
configure_logging(log_level=settings.LOG_LEVEL)

logger = structlog.get_logger(__name__)


def _schema_revision(sync_conn: Connection) -> str | None:
    """
    Return the database's Alembic revision after checking it is the script head.

    The comparison is skipped (with a warning) when ALEMBIC_INI_PATH does not
    exist, e.g. in an image that ships without migrations.

    Raises:
        RuntimeError: The schema is missing or behind the migration scripts
    """
    current = migration.MigrationContext.configure(sync_conn).get_current_revision()

    ini_path = Path(settings.ALEMBIC_INI_PATH)
    if not ini_path.exists():
        logger.warning("alembic_ini_not_found", path=str(ini_path))
        return current

    head = script.ScriptDirectory.from_config(Config(str(ini_path))).get_current_head()
    if current is None:
        msg = "Database schema is missing, run: alembic upgrade head"
        raise RuntimeError(msg)
    if current != head:
        msg = f"Database schema at revision {current} but migrations are at {head}, run: alembic upgrade head"
        raise RuntimeError(msg)
    return current


async def _verify_database() -> None:
    """Fail startup unless the database answers and its schema is current."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
            revision = await conn.run_sync(_schema_revision)
    except (RuntimeError, OSError) as e:
        logger.error("startup_database_check_failed", error=str(e))
        raise
    logger.info("startup_database_ready", revision=revision)


async def _shutdown() -> None:
    if settings.OTEL_ENABLED:
        shutdown_tracer_provider()
    await dispose_engine()
    logger.info("shutdown_complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Install the tracer provider and, outside DEBUG, verify the database."""
    if settings.OTEL_ENABLED and (provider := get_tracer_provider()):
        trace.set_tracer_provider(provider)
        logger.info("otel_tracer_provider_initialized")

    # DEBUG databases are created by the tests or by hand
    if settings.DEBUG:
        logger.info("startup_database_check_skipped", reason="debug")
    else:
        await _verify_database()

    try:
        yield
    finally:
        await _shutdown()


app = FastAPI(
    title="Subway API",
    description="Subway lines, stations and the section chain of each line",
    version=__version__,
    lifespan=lifespan,
)

if settings.OTEL_ENABLED:
    FastAPIInstrumentor().instrument_app(app, excluded_urls=",".join(settings.OTEL_EXCLUDED_URLS))

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(AccessLoggingMiddleware)

app.include_router(stations.router, prefix=settings.API_V1_PREFIX)
app.include_router(lines.router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root() -> dict[str, str]:
    """Service name and version."""
    return {"message": "Subway API", "version": __version__}


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe; never touches the database."""
    return {"status": "healthy"}


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness probe; 503 while the database does not answer."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("readiness_check_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unavailable",
        ) from e
    return {"status": "ready"}
