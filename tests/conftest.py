"""
Test configuration and fixtures.

Provides:
- ``FakeConnection`` / ``FakeSource``: an in-memory connection source that
  records acquisitions, commits, rollbacks, auto-commit switches and releases,
  for exact bookkeeping assertions on the interceptor.
- File-backed SQLite engines with small pools, and the services wired on
  top of them, for the integration scenarios.
"""

import itertools

import pytest

from txbackend.crypt.passwords import PasswordHasher
from txbackend.database.config.config import Settings
from txbackend.database.config.connection_engine import create_connection_engine
from txbackend.database.core.container import build_services, initialize_schema
from txbackend.database.helpers.connection_source import ConnectionSource
from txbackend.database.helpers.context import TransactionContext
from txbackend.database.helpers.errors import ConnectionAcquisitionError
from txbackend.database.helpers.transactionManagement import TransactionManagerRegistry


class FakeConnection:
    """Connection double counting commits and rollbacks."""

    _ids = itertools.count(1)

    def __init__(self, autocommit=True):
        self.id = next(self._ids)
        self.autocommit = autocommit
        self.commits = 0
        self.rollbacks = 0
        self.fail_commit = None
        self.fail_rollback = None

    def commit(self):
        self.commits += 1
        if self.fail_commit is not None:
            raise self.fail_commit

    def rollback(self):
        self.rollbacks += 1
        if self.fail_rollback is not None:
            raise self.fail_rollback

    def __repr__(self):
        return f"FakeConnection({self.id})"


class FakeSource(ConnectionSource):
    """Connection source handing out `FakeConnection` objects."""

    def __init__(self, autocommit=True):
        self.autocommit = autocommit
        self.acquired = []
        self.released = []
        self.autocommit_changes = []
        self.fail_acquire = False
        self.prepare = None

    def acquire(self):
        if self.fail_acquire:
            raise ConnectionAcquisitionError("pool exhausted")
        connection = FakeConnection(self.autocommit)
        if self.prepare is not None:
            self.prepare(connection)
        self.acquired.append(connection)
        return connection

    def release(self, connection):
        self.released.append(connection)

    def is_autocommit(self, connection):
        return connection.autocommit

    def set_autocommit(self, connection, enabled):
        self.autocommit_changes.append((connection, enabled))
        connection.autocommit = enabled

    @property
    def last(self):
        return self.acquired[-1]


@pytest.fixture(autouse=True)
def clean_transaction_context():
    """Guarantee no test starts or leaves with an installed transaction state."""
    TransactionContext.clear()
    yield
    TransactionContext.clear()


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def make_source():
    """Factory for additional `FakeSource` instances."""
    return FakeSource


@pytest.fixture
def registry():
    return TransactionManagerRegistry()


@pytest.fixture
def manager(registry, fake_source):
    """Default transaction manager over a `FakeSource`."""
    return registry.register(registry.default_name, fake_source)


def make_engine(path, pool_size=3, pool_timeout=2.0):
    config = Settings(
        DB_DRIVER_NAME="sqlite",
        DB_DATABASE_NAME=str(path),
        DB_POOL_SIZE=pool_size,
        DB_MAX_OVERFLOW=0,
        DB_POOL_TIMEOUT=pool_timeout,
    )
    engine = create_connection_engine(config)
    initialize_schema(engine)
    return engine


@pytest.fixture
def engine(tmp_path):
    """SQLite engine with the application schema and a 3-connection pool."""
    engine = make_engine(tmp_path / "test.db")
    yield engine
    engine.dispose()


@pytest.fixture
def services(engine):
    """Services wired on `engine` with a private manager registry and a fast hasher."""
    return build_services(engine, TransactionManagerRegistry(), PasswordHasher(rounds=4))


@pytest.fixture
def engine_factory():
    """Factory for extra engines, e.g. with a smaller pool; disposed after the test."""
    engines = []

    def factory(path, **kwargs):
        engine = make_engine(path, **kwargs)
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.dispose()
