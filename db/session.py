"""
db/session.py

Engine and session lifecycle for the connector.

Nothing touches the database at import time; the engine is built on first
use from ``db.config.get_database_settings`` and can be disposed on shutdown.
"""

from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import DatabaseSettings, get_database_settings


def create_db_engine(settings: DatabaseSettings | None = None) -> Engine:
    settings = settings or get_database_settings()
    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle_seconds,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    return create_db_engine()


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker[Session]:
    # Loaded objects stay readable after commit.
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)


def SessionLocal() -> Session:
    """Open a new session bound to the shared engine."""
    return _session_factory()()


def dispose_engine() -> None:
    """
    Close pooled connections and forget the engine, if one was built.
    """

    if get_engine.cache_info().currsize:
        get_engine().dispose()
    _session_factory.cache_clear()
    get_engine.cache_clear()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding one session per request; the router owns commit/rollback.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
