"""
Connection Resolver
===================

Read-only view over the transaction context for data-access code.

Data-access helpers ask ``ConnectionResolver.current_connection()`` which
connection to use. When a transaction is active they get its connection, so
every statement issued anywhere in the call chain joins that transaction.
Otherwise they get ``NO_TRANSACTION`` and must borrow their own connection.
"""

from typing import Any, Optional

from txbackend.database.helpers.context import TransactionContext, TransactionState


class _NoTransaction:
    """Type of the `NO_TRANSACTION` sentinel."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_TRANSACTION"


NO_TRANSACTION = _NoTransaction()
"""Returned by `ConnectionResolver.current_connection()` outside a transaction."""


class ConnectionResolver:
    """Answers "is there a current transaction, and which connection does it use?"."""

    @staticmethod
    def current_connection() -> Any:
        """
        Return the active transaction's connection.

        Returns
        -------
        Any
            The connection held by the current `TransactionState`, or
            `NO_TRANSACTION` when no transaction is active.
        """
        state = TransactionContext.get()
        if state is None:
            return NO_TRANSACTION
        return state.connection

    @staticmethod
    def current_state() -> Optional[TransactionState]:
        return TransactionContext.get()

    @staticmethod
    def in_transaction() -> bool:
        return TransactionContext.get() is not None
