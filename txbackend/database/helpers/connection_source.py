"""
Connection Sources
==================

A connection source hands out raw connections and takes them back. The
transaction interceptor only talks to this interface, so the pool behind it
stays opaque.

``EngineConnectionSource`` adapts a SQLAlchemy ``Engine``: connections are
checked out of the engine's pool in auto-commit mode, which is what ad-hoc
statements outside a transaction rely on. The interceptor switches a
connection to the dialect's default isolation level for the duration of a
transaction and back to ``AUTOCOMMIT`` before returning it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import exc
from sqlalchemy.engine import Connection, Engine

from txbackend.database.helpers.errors import ConnectionAcquisitionError

logger = logging.getLogger(__name__)

AUTOCOMMIT = "AUTOCOMMIT"


class ConnectionSource(ABC):
    """Interface of anything the transaction manager can borrow connections from."""

    @abstractmethod
    def acquire(self) -> Any:
        """
        Borrow a connection. May block while the pool is exhausted.

        Raises
        ------
        ConnectionAcquisitionError
            If no connection can be supplied.
        """

    @abstractmethod
    def release(self, connection: Any) -> None:
        """Give a borrowed connection back to the source."""

    @abstractmethod
    def is_autocommit(self, connection: Any) -> bool:
        """Return whether `connection` commits every statement on its own."""

    @abstractmethod
    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        """Switch `connection` in or out of auto-commit mode."""


class EngineConnectionSource(ConnectionSource):
    """
    Connection source backed by a SQLAlchemy `Engine` and its pool.

    Parameters
    ----------
    engine : Engine
        The pooled engine to check connections out of.
    autocommit : bool, optional
        Whether connections are handed out in auto-commit mode. Default True.
    """

    def __init__(self, engine: Engine, autocommit: bool = True):
        self.engine = engine
        self._checkout_engine = engine.execution_options(isolation_level=AUTOCOMMIT) if autocommit else engine

    def acquire(self) -> Connection:
        try:
            return self._checkout_engine.connect()
        except exc.TimeoutError as e:
            raise ConnectionAcquisitionError(f"Connection pool exhausted: {e}") from e
        except exc.DBAPIError as e:
            raise ConnectionAcquisitionError(f"Could not connect to the database: {e}") from e

    def release(self, connection: Connection) -> None:
        connection.close()

    def is_autocommit(self, connection: Connection) -> bool:
        return connection.get_execution_options().get("isolation_level") == AUTOCOMMIT

    def set_autocommit(self, connection: Connection, enabled: bool) -> None:
        level = AUTOCOMMIT if enabled else connection.default_isolation_level
        logger.debug("Setting isolation level %s on %r", level, connection)
        connection.execution_options(isolation_level=level)

    def __repr__(self) -> str:
        return f"EngineConnectionSource({self.engine.url!r})"
