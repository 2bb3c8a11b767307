"""
The `helpers` package implements declarative transaction management on top
of a pooled connection source.

Contents
--------
- errors
    `TransactionError`, `ConnectionAcquisitionError`, `ReentrancyError`, ...
- context
    `TransactionContext`: context-variable slot holding the open
    `TransactionState` of the current thread or asyncio task
- resolver
    `ConnectionResolver.current_connection()`: the open transaction's
    connection, or `NO_TRANSACTION`
- connection_source
    `ConnectionSource` interface and the SQLAlchemy `EngineConnectionSource`
- transactionManagement
    `TransactionManager`, `TransactionManagerRegistry` and the
    `TransactionInterceptor` that opens, joins, commits and rolls back
- proxy
    `ProxyFactory` / `TransactionalProxy`: route public method calls of
    registered classes through the interceptor
- marker
    `@transactional` for classes (marker) and functions (direct wrapping),
    plus the startup `scan_components`
- sql_executor
    `SqlExecutor`: single statements on the current transaction's connection
    or on an ad-hoc auto-committing one
"""

from txbackend.database.helpers.connection_source import ConnectionSource, EngineConnectionSource
from txbackend.database.helpers.context import TransactionContext, TransactionState
from txbackend.database.helpers.errors import (
    ConnectionAcquisitionError,
    DatabaseError,
    IllegalStateError,
    ManagerNotFoundError,
    ReentrancyError,
    TransactionError,
)
from txbackend.database.helpers.marker import TransactionMarker, find_marker, scan_components, transactional
from txbackend.database.helpers.proxy import ProxyFactory, TransactionalProxy, unwrap
from txbackend.database.helpers.resolver import NO_TRANSACTION, ConnectionResolver
from txbackend.database.helpers.sql_executor import SqlExecutor
from txbackend.database.helpers.transactionManagement import (
    DEFAULT_MANAGER_NAME,
    TransactionInterceptor,
    TransactionManager,
    TransactionManagerRegistry,
    transaction_managers,
)
