"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds a SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- `DATABASE_URL` takes precedence; otherwise `URL.create(...)` assembles the
  URL from the `DB_*` settings.
- SQLite URLs (local runs and the test-suite) share one connection through
  `StaticPool` so an in-memory database survives across sessions and threads.
- All ORM models must inherit from `declarativeBase`.
"""


from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import MetaData
from teamhub.database.config.config import settings


def build_connection_url() -> URL:
    """Return the SQLAlchemy URL described by the current settings."""
    if settings.DATABASE_URL:
        return make_url(settings.DATABASE_URL)
    return URL.create(
        drivername=settings.DB_DRIVER_NAME,
        username=settings.DB_USERNAME,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        database=settings.DB_DATABASE_NAME,
    )


connection_url = build_connection_url()
"""SQLAlchemy connection URL built from Settings."""

if connection_url.get_backend_name() == "sqlite":
    connection_engine = create_engine(
        connection_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    connection_engine = create_engine(connection_url, pool_pre_ping=True)
"""Engine object: core interface to the database."""

metadata = MetaData()
"""Schema-level information about tables, constraints and indexes."""

declarativeBase = declarative_base(metadata=metadata)
"""Root class for ORM models."""
