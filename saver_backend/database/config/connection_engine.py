"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds the SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Uses `URL.create(...)` so credentials stay environment-driven.
- Credentials and host are optional: a SQLite file database only needs
  `DB_DRIVER_NAME=sqlite` and `DB_DATABASE_NAME=<path>`.
- All ORM models must inherit from `declarativeBase`.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import URL
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import MetaData
from saver_backend.database.config.config import settings

connection_url = URL.create(
    drivername=settings.DB_DRIVER_NAME,
    username=settings.DB_USERNAME or None,
    password=settings.DB_PASSWORD or None,
    host=settings.DB_HOST or None,
    database=settings.DB_DATABASE_NAME,
)
"""SQLAlchemy connection URL built from Settings."""

connection_engine = create_engine(connection_url, pool_pre_ping=True)
"""Engine object: core interface to the database (connections, pooling, SQL execution)."""

metadata = MetaData()
"""Schema-level information about tables, constraints and indexes, shared across all models."""

declarativeBase = declarative_base(metadata=metadata)
"""Root class for ORM models."""


def create_schema() -> None:
    """Create every table registered on `metadata` that does not exist yet."""
    # entities must be imported so their tables are registered
    import saver_backend.database.entities  # noqa: F401

    metadata.create_all(connection_engine)
