"""
Transaction Context
===================

Execution-unit-local slot holding the state of the transaction that is open
for the current call chain.

The slot is a ``contextvars.ContextVar``: every thread starts with its own
context, and every asyncio task runs in a copy of the context it was created
in. Because ``asyncio.create_task`` and ``asyncio.to_thread`` copy the
creator's context, a copied value alone would leak the creator's open
transaction into the new task or thread. Each state therefore records the
execution unit that opened it (the running asyncio task, or the thread when
no task is running), and the slot only reports a state to its owner.
"""

import asyncio
import contextvars
import threading
from dataclasses import dataclass, field
from typing import Any, Hashable, Optional

from txbackend.database.helpers.errors import ReentrancyError


def current_execution_unit() -> Hashable:
    """Return the running asyncio task, or the current thread's id outside one."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    if task is not None:
        return task
    return threading.get_ident()


@dataclass(frozen=True)
class TransactionState:
    """
    One open transaction.

    Attributes
    ----------
    connection : Any
        The connection borrowed for the lifetime of the transaction. Owned
        exclusively by this state.
    prior_autocommit : bool
        Auto-commit setting the connection had before the transaction began.
    manager_name : str
        Name of the transaction manager that opened the transaction.
    connection_source : ConnectionSource, optional
        Source the connection was borrowed from.
    owner : Hashable
        Execution unit that opened the transaction. Defaults to the unit
        constructing the state.
    """

    connection: Any
    prior_autocommit: bool
    manager_name: str
    connection_source: Any = field(default=None, compare=False)
    owner: Hashable = field(default_factory=current_execution_unit, compare=False)


# --------------------------------------------------------------------
# Context variable holding the current transaction state.
# This lets nested calls find the open transaction without
# explicitly threading it through arguments.
# --------------------------------------------------------------------
_transaction_state = contextvars.ContextVar("transaction_state", default=None)


class TransactionContext:
    """Accessors for the current execution unit's transaction slot."""

    @staticmethod
    def get() -> Optional[TransactionState]:
        """Return the active state, or None outside a transaction.

        A state inherited through a copied context (a task or thread spawned
        inside a transaction) belongs to another execution unit and is not
        returned.
        """
        state = _transaction_state.get()
        if state is None or state.owner != current_execution_unit():
            return None
        return state

    @staticmethod
    def set(state: TransactionState) -> None:
        """
        Install `state` as the active transaction state.

        Raises
        ------
        ReentrancyError
            If a state is already installed for this execution unit.
        """
        current = TransactionContext.get()
        if current is not None:
            raise ReentrancyError(
                f"A transaction opened by manager '{current.manager_name}' is already "
                "active in this execution unit"
            )
        _transaction_state.set(state)

    @staticmethod
    def clear() -> None:
        """Remove the active state, if any."""
        _transaction_state.set(None)
