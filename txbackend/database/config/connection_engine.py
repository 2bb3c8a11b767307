"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds the SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point). The
  engine is the raw connection source that transaction managers wrap.
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Uses `URL.create(...)` to keep credentials out of code.
- Pool size, overflow and checkout timeout come from settings; an exhausted
  pool surfaces as `sqlalchemy.exc.TimeoutError` after `DB_POOL_TIMEOUT`.
- SQLite connections are shared across threads by the pool, so
  `check_same_thread` is disabled for that driver.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import QueuePool
from sqlalchemy.schema import MetaData

from txbackend.database.config.config import Settings, settings


def build_connection_url(config: Settings) -> URL:
    """
    Construct the SQLAlchemy connection URL from a `Settings` object.

    Parameters
    ----------
    config : Settings
        Settings providing driver, credentials, host and database name.

    Returns
    -------
    URL
        The URL handed to `create_engine`.
    """
    return URL.create(
        drivername=config.DB_DRIVER_NAME,
        username=config.DB_USERNAME,
        password=config.DB_PASSWORD,
        host=config.DB_HOST,
        port=config.DB_PORT,
        database=config.DB_DATABASE_NAME,
    )


def create_connection_engine(config: Settings) -> Engine:
    """
    Create the pooled Engine described by `config`.

    Parameters
    ----------
    config : Settings
        Settings providing the URL parts and pool sizing.

    Returns
    -------
    Engine
        A lazily connecting engine backed by a `QueuePool`.
    """
    url = build_connection_url(config)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
        connect_args=connect_args,
    )


# --------------------------------------------------------------------
# Engine object: core interface to the database.
# Nothing connects until the first checkout.
# --------------------------------------------------------------------
connection_engine = create_connection_engine(settings)
"""Engine object: core interface to the database, responsible for pooling."""

# --------------------------------------------------------------------
# Metadata object: stores schema-level information about tables,
# constraints, indexes, etc. Shared across all models.
# --------------------------------------------------------------------
metadata = MetaData()
"""Schema-level information shared across all models."""

declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: root class for ORM models."""
