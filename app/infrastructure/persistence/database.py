"""
Database engine factory.

Builds the SQLAlchemy engine from settings and creates the schema.
SQLite is used for local development and tests, PostgreSQL (psycopg2)
in deployment.
"""

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.infrastructure.persistence.tables import metadata

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    In-memory SQLite shares one connection so every repository sees
    the same database.
    """
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, pool_pre_ping=True)


def init_schema(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    metadata.create_all(engine)
    logger.info("Database schema ready (%d tables).", len(metadata.tables))


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Return the process-wide engine built from application settings."""
    return build_engine(settings.database_url)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime read from the database to aware UTC.

    SQLite drops timezone information on the way back.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
