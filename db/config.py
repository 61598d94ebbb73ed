"""
db/config.py

Database settings for the user integration connector.

Values come from the process environment first, then from `.env` and
`.env.local` in the project root. Only PostgreSQL is accepted because the
user upsert is an ``INSERT ... ON CONFLICT`` statement.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILENAMES = (".env", ".env.local")

# Checked in this order; CLOUD_DATABASE_URL only counts in cloud environments.
DATABASE_URL_VARIABLES = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
_CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})

_PSYCOPG_SCHEME = "postgresql+psycopg://"
_PLAIN_POSTGRES_SCHEMES = ("postgres://", "postgresql://")


class DatabaseConfigurationError(RuntimeError):
    """Raised when no usable PostgreSQL URL can be resolved."""


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection and pool settings for the connector engine.
    """

    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle_seconds: int = 1800


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export ") :].lstrip()
    key, separator, value = line.partition("=")
    key = key.strip()
    if not separator or not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(root: Path | None = None) -> None:
    """
    Load KEY=VALUE pairs from the project's env files.

    Variables already present in the process environment win.
    """

    base_dir = root or PROJECT_ROOT
    for filename in ENV_FILENAMES:
        env_path = base_dir / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def normalize_postgres_url(url: str) -> str:
    """
    Point plain postgres URLs at SQLAlchemy's psycopg 3 driver.
    """

    url = url.strip()
    for scheme in _PLAIN_POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return _PSYCOPG_SCHEME + url[len(scheme) :]
    return url


def resolve_database_url() -> str:
    """
    Pick the connector database URL.

    DATABASE_URL always wins. CLOUD_DATABASE_URL is used when ENVIRONMENT is
    cloud-like, LOCAL_DATABASE_URL otherwise. Non-PostgreSQL URLs are
    rejected.
    """

    load_env_files()

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    for variable in DATABASE_URL_VARIABLES:
        if variable == "CLOUD_DATABASE_URL" and environment not in _CLOUD_ENVIRONMENTS:
            continue
        raw_url = (os.getenv(variable) or "").strip()
        if not raw_url:
            continue

        url = normalize_postgres_url(raw_url)
        if not url.startswith("postgresql"):
            raise DatabaseConfigurationError(
                f"{variable} must be a PostgreSQL URL; the user upsert needs ON CONFLICT support."
            )
        return url

    raise DatabaseConfigurationError(
        "No database URL configured. Set " + ", ".join(DATABASE_URL_VARIABLES) + "."
    )


def _get_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_positive_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def get_database_settings() -> DatabaseSettings:
    """
    Resolve the URL and pool tuning (SQL_ECHO, DB_POOL_SIZE, DB_MAX_OVERFLOW,
    DB_POOL_RECYCLE) for the engine.
    """

    url = resolve_database_url()
    return DatabaseSettings(
        url=url,
        echo=_get_bool_env("SQL_ECHO", False),
        pool_size=max(1, _get_positive_int_env("DB_POOL_SIZE", 5)),
        max_overflow=_get_positive_int_env("DB_MAX_OVERFLOW", 10),
        pool_recycle_seconds=_get_positive_int_env("DB_POOL_RECYCLE", 1800),
    )
