from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Runs before any database connection is initialised. Raises RuntimeError
    listing every missing or invalid variable so the operator can fix all
    problems in one restart cycle.
    """

    from db.config import DATABASE_URL_VARIABLES, load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    if not any(os.getenv(name, "").strip() for name in DATABASE_URL_VARIABLES):
        errors.append(
            "No database URL configured. Set "
            + ", ".join(DATABASE_URL_VARIABLES)
            + ". Only PostgreSQL is supported."
        )

    # --- HTTP timeouts --------------------------------------------------
    for name in (
        "EXTERNAL_HTTP_CONNECT_TIMEOUT_SECONDS",
        "EXTERNAL_HTTP_RESPONSE_TIMEOUT_SECONDS",
        "EXTERNAL_HTTP_BODY_TIMEOUT_SECONDS",
    ):
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            if float(raw) <= 0:
                errors.append(f"{name} must be a positive number of seconds, got {raw!r}.")
        except ValueError:
            errors.append(f"{name} must be a number of seconds, got {raw!r}.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Aborts startup when a table is missing so migrations are run before
    serving traffic. Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot; release the pool on shutdown."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield

    from db.session import dispose_engine

    dispose_engine()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="User Integration Connector API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.error_handlers import register_exception_handlers
    from app.api.routers import user_integration_router

    register_exception_handlers(application)
    application.include_router(user_integration_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
