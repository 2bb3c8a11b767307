"""
SQL Executor
============

Single-statement execution helper used by the DAOs.

Every call asks ``ConnectionResolver`` for the current transaction. Inside a
transaction the statement runs on the transaction's connection and becomes
part of it. Outside one, the executor borrows an ad-hoc connection from its
connection source, runs the statement in auto-commit mode and gives the
connection back straight away.

A transaction only counts when its connection came from the executor's own
connection source. A statement for another database issued inside such a
transaction raises ``IllegalStateError`` rather than running on the wrong
connection or committing on its own.

Results are materialized before an ad-hoc connection is released, so callers
always get plain lists / rows rather than live cursors.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional

from sqlalchemy.engine import Row
from sqlalchemy.sql import Executable

from txbackend.database.helpers.connection_source import ConnectionSource
from txbackend.database.helpers.errors import IllegalStateError
from txbackend.database.helpers.resolver import ConnectionResolver

logger = logging.getLogger(__name__)


class SqlExecutor:
    """
    Runs statements on the current transaction's connection, or an ad-hoc one.

    Parameters
    ----------
    connection_source : ConnectionSource
        Source of ad-hoc connections for statements issued outside a
        transaction.
    """

    def __init__(self, connection_source: ConnectionSource):
        self.connection_source = connection_source

    @contextmanager
    def _connection(self) -> Iterator[Any]:
        state = ConnectionResolver.current_state()
        if state is not None:
            if state.connection_source is not self.connection_source:
                raise IllegalStateError(
                    f"Transaction opened by manager '{state.manager_name}' does not use "
                    f"{self.connection_source!r}"
                )
            yield state.connection
            return

        logger.debug("No active transaction, borrowing an ad-hoc connection")
        connection = self.connection_source.acquire()
        try:
            yield connection
            if not self.connection_source.is_autocommit(connection):
                connection.commit()
        finally:
            self.connection_source.release(connection)

    def execute(self, statement: Executable, parameters: Optional[Mapping[str, Any]] = None) -> int:
        """
        Execute a data-modifying statement.

        Returns
        -------
        int
            The number of rows matched by the statement.
        """
        with self._connection() as connection:
            result = connection.execute(statement, parameters)
            return result.rowcount

    def fetch_all(self, statement: Executable, parameters: Optional[Mapping[str, Any]] = None) -> List[Row]:
        with self._connection() as connection:
            return list(connection.execute(statement, parameters).all())

    def fetch_one(self, statement: Executable, parameters: Optional[Mapping[str, Any]] = None) -> Optional[Row]:
        with self._connection() as connection:
            return connection.execute(statement, parameters).first()

    def scalar(self, statement: Executable, parameters: Optional[Mapping[str, Any]] = None) -> Any:
        with self._connection() as connection:
            return connection.execute(statement, parameters).scalar()
