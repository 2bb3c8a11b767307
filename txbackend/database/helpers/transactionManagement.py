"""
Database Transaction Management
===============================

This module provides the transaction managers and the interceptor that wraps
a call in a managed transaction.

It allows seamless propagation of an open transaction across function calls
without explicitly threading a connection through arguments: the transaction
state lives in the execution-unit-local ``TransactionContext`` and any code
further down the call chain finds it there.

Key features
~~~~~~~~~~~~
- Named transaction managers, each wrapping one connection source
- Implicit reuse of an already open transaction (join existing or start new)
- Exactly one commit or one rollback per outermost call
- Rollback failures recorded next to, never instead of, the original error
- Auto-commit restored and connection released on every exit path

Example
-------
>>> registry = TransactionManagerRegistry()
>>> manager = registry.register("transactionManager", EngineConnectionSource(engine))
>>> with manager.transaction() as connection:
...     connection.execute(text("INSERT INTO audit (event) VALUES ('login')"))
"""

import functools
import inspect
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

from txbackend.database.helpers.connection_source import ConnectionSource
from txbackend.database.helpers.context import TransactionContext, TransactionState
from txbackend.database.helpers.errors import ManagerNotFoundError, TransactionError

logger = logging.getLogger(__name__)

DEFAULT_MANAGER_NAME = "transactionManager"
"""Name of the manager that governs targets which do not name one."""


class TransactionInterceptor:
    """
    Wraps invocations in a transaction of one `TransactionManager`.

    Parameters
    ----------
    manager : TransactionManager
        The manager whose connection source supplies new transactions.
    """

    def __init__(self, manager: "TransactionManager"):
        self.manager = manager

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """
        Open a transaction, or join the one already active in this execution unit.

        Yields
        ------
        Any
            The connection of the active transaction.

        Raises
        ------
        ConnectionAcquisitionError
            If a new transaction is needed and no connection can be acquired.
        TransactionError
            If the body raises (the body's error is the ``__cause__``) or the
            commit fails.
        """
        state = TransactionContext.get()
        if state is not None:
            if state.manager_name != self.manager.name:
                logger.warning(
                    "Manager '%s' joins a transaction opened by manager '%s'",
                    self.manager.name,
                    state.manager_name,
                )
            yield state.connection
            return

        state = self._begin()
        try:
            try:
                yield state.connection
            except Exception as e:
                rollback_error = self._rollback(state)
                raise TransactionError(
                    f"Transaction on '{self.manager.name}' rolled back after {type(e).__name__}: {e}",
                    rollback_error=rollback_error,
                ) from e
            except BaseException:
                self._rollback(state)
                raise
            self._commit(state)
        finally:
            self._end(state)

    def invoke(self, func: Callable, *args, **kwargs) -> Any:
        """Call `func` inside a transaction and return its result."""
        with self.transaction():
            return func(*args, **kwargs)

    async def invoke_async(self, func: Callable, *args, **kwargs) -> Any:
        """Await `func` inside a transaction scoped to the running task."""
        with self.transaction():
            return await func(*args, **kwargs)

    def wrap(self, func: Callable) -> Callable:
        """Return a wrapper routing every call of `func` through this interceptor."""
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                return await self.invoke_async(func, *args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return self.invoke(func, *args, **kwargs)

        return wrapper

    def _begin(self) -> TransactionState:
        source = self.manager.connection_source
        connection = source.acquire()
        try:
            prior_autocommit = source.is_autocommit(connection)
            if prior_autocommit:
                source.set_autocommit(connection, False)
            state = TransactionState(connection, prior_autocommit, self.manager.name, connection_source=source)
            TransactionContext.set(state)
        except BaseException:
            source.release(connection)
            raise
        logger.debug("Began transaction on '%s'", self.manager.name)
        return state

    def _commit(self, state: TransactionState) -> None:
        try:
            state.connection.commit()
        except Exception as e:
            logger.error("Commit on '%s' failed", self.manager.name, exc_info=True)
            raise TransactionError(f"Commit on '{self.manager.name}' failed: {e}") from e
        logger.debug("Committed transaction on '%s'", self.manager.name)

    def _rollback(self, state: TransactionState) -> Optional[BaseException]:
        try:
            state.connection.rollback()
        except Exception as e:
            logger.error("Rollback on '%s' failed", self.manager.name, exc_info=True)
            return e
        logger.debug("Rolled back transaction on '%s'", self.manager.name)
        return None

    def _end(self, state: TransactionState) -> None:
        TransactionContext.clear()
        source = self.manager.connection_source
        if state.prior_autocommit:
            try:
                source.set_autocommit(state.connection, True)
            except Exception:
                logger.warning("Could not restore auto-commit on '%s'", self.manager.name, exc_info=True)
        try:
            source.release(state.connection)
        except Exception:
            logger.warning("Could not release connection of '%s'", self.manager.name, exc_info=True)


class TransactionManager:
    """
    A named transaction manager wrapping one connection source.

    Parameters
    ----------
    name : str
        Name the manager is registered under.
    connection_source : ConnectionSource
        Where new transactions borrow their connection from.
    """

    def __init__(self, name: str, connection_source: ConnectionSource):
        self.name = name
        self.connection_source = connection_source
        self.interceptor = TransactionInterceptor(self)

    def transaction(self):
        """Context manager form of the interceptor; yields the connection."""
        return self.interceptor.transaction()

    def __repr__(self) -> str:
        return f"TransactionManager({self.name!r}, {self.connection_source!r})"


class TransactionManagerRegistry:
    """
    In-memory registry of transaction managers by name.

    Managers are registered once at startup; lookups afterwards are read-only.

    Parameters
    ----------
    default_name : str, optional
        Name looked up when a caller asks for the default manager.
    """

    def __init__(self, default_name: str = DEFAULT_MANAGER_NAME):
        self.default_name = default_name
        self._managers: Dict[str, TransactionManager] = {}
        self._lock = threading.Lock()

    def register(self, name: str, connection_source: ConnectionSource) -> TransactionManager:
        """
        Register a new manager wrapping `connection_source` under `name`.

        Raises
        ------
        ValueError
            If a manager is already registered under `name`.
        """
        with self._lock:
            if name in self._managers:
                raise ValueError(f"A transaction manager named '{name}' is already registered")
            manager = TransactionManager(name, connection_source)
            self._managers[name] = manager
        logger.info("Registered transaction manager '%s' on %r", name, connection_source)
        return manager

    def unregister(self, name: str) -> None:
        with self._lock:
            self._managers.pop(name, None)

    def get(self, name: Optional[str] = None) -> TransactionManager:
        """
        Return the manager registered under `name`, or the default manager.

        Raises
        ------
        ManagerNotFoundError
            If no such manager exists.
        """
        if name is None:
            name = self.default_name
        try:
            return self._managers[name]
        except KeyError:
            raise ManagerNotFoundError(f"No transaction manager named '{name}' is registered") from None

    def __contains__(self, name: str) -> bool:
        return name in self._managers

    def __iter__(self):
        return iter(list(self._managers))

    def __len__(self) -> int:
        return len(self._managers)


# --------------------------------------------------------------------
# Process-wide registry used by the `@transactional` decorator and
# by proxy factories created without an explicit registry.
# --------------------------------------------------------------------
transaction_managers = TransactionManagerRegistry()
"""Default registry of transaction managers."""
