"""
Unit tests for TransactionInterceptor and the manager registry.

Tests begin/commit/rollback/cleanup bookkeeping against a recording
connection source.
"""

import asyncio
import logging

import pytest

from txbackend.database.helpers.context import TransactionContext
from txbackend.database.helpers.errors import (
    ConnectionAcquisitionError,
    ManagerNotFoundError,
    TransactionError,
)
from txbackend.database.helpers.resolver import NO_TRANSACTION, ConnectionResolver


class BusinessError(Exception):
    pass


class TestInterceptorCommit:
    """Test the normal-return path."""

    def test_returns_result_and_commits_once(self, manager, fake_source):
        """Test that the result is returned after exactly one commit."""
        result = manager.interceptor.invoke(lambda x: x * 2, 21)

        assert result == 42
        assert len(fake_source.acquired) == 1
        connection = fake_source.last
        assert connection.commits == 1
        assert connection.rollbacks == 0

    def test_releases_connection_once_and_restores_autocommit(self, manager, fake_source):
        """Test cleanup after a commit."""
        manager.interceptor.invoke(lambda: None)

        connection = fake_source.last
        assert fake_source.released == [connection]
        assert fake_source.autocommit_changes == [(connection, False), (connection, True)]
        assert connection.autocommit is True
        assert TransactionContext.get() is None

    def test_autocommit_untouched_when_already_off(self, registry, make_source):
        """Test that a connection not in auto-commit mode is left as is."""
        source = make_source(autocommit=False)
        manager = registry.register("manual", source)
        manager.interceptor.invoke(lambda: None)

        assert source.autocommit_changes == []
        assert source.last.commits == 1
        assert source.released == [source.last]

    def test_state_visible_during_call(self, manager, fake_source):
        """Test that the wrapped call runs with the state installed."""
        seen = {}

        def body():
            state = TransactionContext.get()
            seen["connection"] = state.connection
            seen["prior_autocommit"] = state.prior_autocommit
            seen["manager_name"] = state.manager_name
            seen["autocommit_during"] = state.connection.autocommit

        manager.interceptor.invoke(body)

        assert seen == {
            "connection": fake_source.last,
            "prior_autocommit": True,
            "manager_name": manager.name,
            "autocommit_during": False,
        }

    def test_commit_failure_raises_transaction_error(self, manager, fake_source):
        """Test that a failed commit surfaces with its cause and still cleans up."""
        failure = RuntimeError("disk full")
        fake_source.prepare = lambda connection: setattr(connection, "fail_commit", failure)

        with pytest.raises(TransactionError) as exc_info:
            manager.interceptor.invoke(lambda: "value")

        assert exc_info.value.cause is failure
        assert fake_source.last.rollbacks == 0
        assert fake_source.released == [fake_source.last]
        assert TransactionContext.get() is None


class TestInterceptorRollback:
    """Test the exceptional paths."""

    def test_business_error_rolls_back_once(self, manager, fake_source):
        """Test that a failing call is rolled back, wrapped, and cleaned up."""
        original = BusinessError("boom")

        def body():
            raise original

        with pytest.raises(TransactionError) as exc_info:
            manager.interceptor.invoke(body)

        connection = fake_source.last
        assert exc_info.value.__cause__ is original
        assert exc_info.value.cause is original
        assert exc_info.value.rollback_error is None
        assert exc_info.value.suppressed == ()
        assert connection.rollbacks == 1
        assert connection.commits == 0
        assert fake_source.released == [connection]
        assert connection.autocommit is True
        assert TransactionContext.get() is None

    def test_rollback_failure_keeps_original_cause(self, manager, fake_source):
        """Test that a failing rollback is attached, never substituted."""
        rollback_failure = ConnectionError("connection lost")
        fake_source.prepare = lambda connection: setattr(connection, "fail_rollback", rollback_failure)
        original = BusinessError("constraint violated")

        def body():
            raise original

        with pytest.raises(TransactionError) as exc_info:
            manager.interceptor.invoke(body)

        error = exc_info.value
        assert error.cause is original
        assert error.rollback_error is rollback_failure
        assert error.suppressed == (rollback_failure,)
        assert "rollback also failed" in str(error)
        assert fake_source.last.rollbacks == 1
        assert fake_source.released == [fake_source.last]
        assert TransactionContext.get() is None

    def test_base_exception_propagates_unwrapped(self, manager, fake_source):
        """Test that interrupts roll back but are not wrapped."""

        def body():
            raise KeyboardInterrupt()

        with pytest.raises(KeyboardInterrupt):
            manager.interceptor.invoke(body)

        assert fake_source.last.rollbacks == 1
        assert fake_source.last.commits == 0
        assert fake_source.released == [fake_source.last]
        assert TransactionContext.get() is None

    def test_cleanup_failure_is_logged_not_raised(self, manager, fake_source, caplog):
        """Test that a failing release does not overturn a committed result."""

        def failing_release(connection):
            raise RuntimeError("pool closed")

        fake_source.release = failing_release

        with caplog.at_level(logging.WARNING):
            assert manager.interceptor.invoke(lambda: "ok") == "ok"

        assert fake_source.last.commits == 1
        assert "Could not release connection" in caplog.text
        assert TransactionContext.get() is None


class TestInterceptorAcquisition:
    """Test connection acquisition failures."""

    def test_acquisition_failure_propagates(self, manager, fake_source):
        """Test that no transaction is opened when no connection is available."""
        fake_source.fail_acquire = True
        called = []

        with pytest.raises(ConnectionAcquisitionError):
            manager.interceptor.invoke(lambda: called.append(True))

        assert called == []
        assert fake_source.released == []
        assert TransactionContext.get() is None


class TestInterceptorNesting:
    """Test join-existing-or-start-new propagation."""

    def test_nested_calls_commit_once(self, manager, fake_source):
        """Test that inner calls are pass-throughs."""
        interceptor = manager.interceptor

        def level3():
            return ConnectionResolver.current_connection()

        def level2():
            return interceptor.invoke(level3)

        def level1():
            return interceptor.invoke(level2)

        connection = interceptor.invoke(level1)

        assert len(fake_source.acquired) == 1
        assert connection is fake_source.last
        assert connection.commits == 1
        assert connection.rollbacks == 0
        assert fake_source.released == [connection]

    def test_inner_failure_rolls_back_once_at_outer_boundary(self, manager, fake_source):
        """Test that an inner error reaches the outer call unwrapped and is rolled back once."""
        interceptor = manager.interceptor
        original = BusinessError("inner")

        def inner():
            raise original

        def outer():
            interceptor.invoke(inner)

        with pytest.raises(TransactionError) as exc_info:
            interceptor.invoke(outer)

        assert exc_info.value.cause is original
        assert fake_source.last.rollbacks == 1
        assert fake_source.last.commits == 0
        assert len(fake_source.acquired) == 1

    def test_inner_failure_caught_by_outer_still_commits(self, manager, fake_source):
        """Test that the outer call owns the outcome."""
        interceptor = manager.interceptor

        def inner():
            raise BusinessError("handled")

        def outer():
            try:
                interceptor.invoke(inner)
            except BusinessError:
                return "recovered"

        assert interceptor.invoke(outer) == "recovered"
        assert fake_source.last.commits == 1
        assert fake_source.last.rollbacks == 0

    def test_other_manager_joins_with_warning(self, registry, manager, fake_source, make_source, caplog):
        """Test that a nested call of another manager joins the active transaction."""
        other_source = make_source()
        other = registry.register("reporting", other_source)

        def outer():
            return other.interceptor.invoke(ConnectionResolver.current_connection)

        with caplog.at_level(logging.WARNING):
            connection = manager.interceptor.invoke(outer)

        assert connection is fake_source.last
        assert other_source.acquired == []
        assert "joins a transaction opened by manager" in caplog.text

    def test_sequential_calls_use_separate_transactions(self, manager, fake_source):
        """Test that each outermost call opens its own transaction."""
        manager.interceptor.invoke(lambda: None)
        manager.interceptor.invoke(lambda: None)

        assert len(fake_source.acquired) == 2
        assert [c.commits for c in fake_source.acquired] == [1, 1]
        assert fake_source.released == fake_source.acquired


class TestInterceptorContextManager:
    """Test the `transaction()` context manager form."""

    def test_yields_connection_and_commits(self, manager, fake_source):
        with manager.transaction() as connection:
            assert ConnectionResolver.current_connection() is connection

        assert connection.commits == 1
        assert fake_source.released == [connection]

    def test_rolls_back_on_error(self, manager, fake_source):
        with pytest.raises(TransactionError) as exc_info:
            with manager.transaction():
                raise BusinessError("oops")

        assert isinstance(exc_info.value.cause, BusinessError)
        assert fake_source.last.rollbacks == 1


class TestInterceptorWrap:
    """Test function wrapping, sync and async."""

    def test_wrap_preserves_metadata(self, manager):
        def create_account(owner):
            """Open an account."""
            return owner

        wrapped = manager.interceptor.wrap(create_account)

        assert wrapped.__name__ == "create_account"
        assert wrapped.__doc__ == "Open an account."
        assert wrapped("alice") == "alice"

    def test_async_function_commits_after_await(self, manager, fake_source):
        """Test that coroutine functions keep the transaction open across awaits."""

        async def work():
            await asyncio.sleep(0)
            return ConnectionResolver.current_connection()

        wrapped = manager.interceptor.wrap(work)
        connection = asyncio.run(wrapped())

        assert connection is fake_source.last
        assert connection.commits == 1
        assert fake_source.released == [connection]

    def test_concurrent_tasks_get_separate_connections(self, manager, fake_source):
        """Test that sibling tasks never share a transaction."""

        async def work():
            first = ConnectionResolver.current_connection()
            await asyncio.sleep(0.01)
            assert ConnectionResolver.current_connection() is first
            return first

        wrapped = manager.interceptor.wrap(work)

        async def main():
            return await asyncio.gather(wrapped(), wrapped())

        first, second = asyncio.run(main())

        assert first is not second
        assert first.commits == 1
        assert second.commits == 1
        assert len(fake_source.released) == 2

    def test_child_task_opens_its_own_transaction(self, manager, fake_source):
        """Test that a task spawned inside a transaction never reuses the parent's connection."""
        seen = {}

        async def current():
            return ConnectionResolver.current_connection()

        async def child():
            await asyncio.sleep(0.01)
            seen["child_outside"] = ConnectionResolver.current_connection()
            seen["child"] = await manager.interceptor.invoke_async(current)

        async def body():
            seen["parent"] = ConnectionResolver.current_connection()
            return asyncio.create_task(child())

        async def main():
            task = await manager.interceptor.invoke_async(body)
            await task

        asyncio.run(main())

        assert seen["child_outside"] is NO_TRANSACTION
        assert seen["child"] is not seen["parent"]
        assert len(fake_source.acquired) == 2
        assert [connection.commits for connection in fake_source.acquired] == [1, 1]
        assert fake_source.released == fake_source.acquired

    def test_to_thread_opens_its_own_transaction(self, manager, fake_source):
        """Test that work handed to asyncio.to_thread does not join the caller's transaction."""

        def current():
            return ConnectionResolver.current_connection()

        async def body():
            parent = ConnectionResolver.current_connection()
            worker = await asyncio.to_thread(manager.interceptor.invoke, current)
            return parent, worker

        parent, worker = asyncio.run(manager.interceptor.invoke_async(body))

        assert parent is not worker
        assert parent.commits == 1
        assert worker.commits == 1
        assert len(fake_source.released) == 2


class TestTransactionManagerRegistry:
    """Test manager registration and lookup."""

    def test_register_and_get(self, registry, fake_source):
        manager = registry.register("billing", fake_source)
        assert registry.get("billing") is manager
        assert "billing" in registry
        assert manager.connection_source is fake_source

    def test_default_name(self, registry, manager):
        assert registry.get() is manager
        assert list(registry) == [manager.name]
        assert len(registry) == 1

    def test_duplicate_registration_rejected(self, registry, fake_source):
        registry.register("billing", fake_source)
        with pytest.raises(ValueError):
            registry.register("billing", fake_source)

    def test_unknown_manager(self, registry):
        with pytest.raises(ManagerNotFoundError):
            registry.get("missing")
        with pytest.raises(LookupError):
            registry.get("missing")

    def test_unregister(self, registry, fake_source):
        registry.register("billing", fake_source)
        registry.unregister("billing")
        assert "billing" not in registry
