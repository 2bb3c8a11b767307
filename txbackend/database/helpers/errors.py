"""
Transaction Errors
==================

Exception taxonomy of the transaction management helpers.

- ``ConnectionAcquisitionError``: the connection source could not hand out a
  connection; the transaction was never opened.
- ``TransactionError``: a failure while a transaction was open. The
  triggering error is always the primary cause (``__cause__``); a failed
  rollback is attached as secondary context and never replaces it.
- ``IllegalStateError`` / ``ReentrancyError``: the transaction context was
  asked to install a second state for the same execution unit.
- ``ManagerNotFoundError``: no transaction manager is registered under the
  requested name.
"""

from typing import Optional, Tuple


class DatabaseError(Exception):
    """Base class of every error raised by the transaction helpers."""


class ConnectionAcquisitionError(DatabaseError):
    """The connection source could not supply a connection."""


class TransactionError(DatabaseError):
    """
    Failure raised out of an open transaction.

    Parameters
    ----------
    message : str
        Human-readable description.
    rollback_error : BaseException, optional
        The error raised by a rollback attempt that itself failed.

    Notes
    -----
    Raise it with ``raise TransactionError(...) from original`` so the
    original failure is available as ``__cause__`` and through ``cause``.
    """

    def __init__(self, message: str, rollback_error: Optional[BaseException] = None):
        super().__init__(message)
        self.rollback_error = rollback_error

    @property
    def cause(self) -> Optional[BaseException]:
        """The primary cause: the error that triggered the rollback."""
        return self.__cause__

    @property
    def suppressed(self) -> Tuple[BaseException, ...]:
        """Secondary failures recorded while handling the primary cause."""
        if self.rollback_error is None:
            return ()
        return (self.rollback_error,)

    def __str__(self) -> str:
        text = super().__str__()
        if self.rollback_error is not None:
            text += f" (rollback also failed: {self.rollback_error!r})"
        return text


class IllegalStateError(DatabaseError, RuntimeError):
    """An operation was attempted in a state that does not allow it."""


class ReentrancyError(IllegalStateError):
    """A transaction state is already installed for this execution unit."""


class ManagerNotFoundError(DatabaseError, LookupError):
    """No transaction manager is registered under the requested name."""
