"""SQLAlchemy engine configuration for the fee reference data store."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError

from regfee.backend.src.core.config import Settings, get_settings

LOGGER = structlog.get_logger(__name__)
PROJECT_ROOT = Path(__file__).resolve().parents[4]


class DataStoreError(RuntimeError):
    """Raised when the reference data store is misconfigured or a query fails."""


def _normalize_database_url(raw_url: str) -> URL:
    """Return an absolute :class:`~sqlalchemy.engine.URL` for SQLite databases."""

    url = make_url(raw_url)
    if not url.drivername.startswith("sqlite"):
        return url

    database = url.database or ""
    if database in {"", ":memory:"}:
        return url

    db_path = Path(database)
    if db_path.is_absolute():
        resolved = db_path
    else:
        resolved = PROJECT_ROOT / db_path

    resolved = resolved.resolve()
    if resolved != db_path:
        LOGGER.info(
            "database_path_normalized",
            original=str(db_path),
            resolved=str(resolved),
        )

    return url.set(database=str(resolved))


def build_database_url(settings: Settings) -> URL:
    """Return the connection URL, applying the access key as the password."""

    if not settings.database_url:
        raise DataStoreError(
            "Missing data store environment variables "
            "(REGFEE_DATABASE_URL or DATABASE_URL)."
        )
    try:
        url = _normalize_database_url(settings.database_url)
    except ArgumentError as exc:
        raise DataStoreError(f"Invalid data store URL: {exc}") from exc

    if settings.database_key:
        url = url.set(password=settings.database_key)
    return url


@lru_cache()
def get_engine() -> Engine:
    """Return the process-wide engine, building it on first use."""

    url = build_database_url(get_settings())
    engine = create_engine(url, pool_pre_ping=True, future=True)
    LOGGER.info(
        "database_engine_initialized",
        url=url.render_as_string(hide_password=True),
    )
    return engine


__all__ = ["DataStoreError", "build_database_url", "get_engine"]
