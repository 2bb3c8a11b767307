"""
Transactional Marker
====================

The ``@transactional`` decorator and the startup scan that discovers it.

On a class, the decorator only records a ``TransactionMarker``; nothing is
intercepted until the class is registered with a ``ProxyFactory`` (normally by
``scan_components`` at startup) and its instances are handed out as proxies.

On a plain function, the decorator wraps the function directly: every call
runs through the interceptor of the named manager, looked up in the
process-wide ``transaction_managers`` registry.

Example
-------
>>> @transactional
... class AccountService:
...     def open_account(self, owner):
...         ...
>>>
>>> @transactional(manager_name="reporting")
... def rebuild_report(day):
...     ...
"""

import functools
import inspect
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Iterable, List, Optional, Union

from txbackend.database.helpers.transactionManagement import transaction_managers

logger = logging.getLogger(__name__)

MARKER_ATTRIBUTE = "__transactional__"


@dataclass(frozen=True)
class TransactionMarker:
    """
    Declarative metadata attached to a transactional class.

    A `manager_name` of None binds the class to the default manager.
    """

    manager_name: Optional[str] = None


def transactional(target=None, *, manager_name: Optional[str] = None):
    """
    Mark a class as transactional, or wrap a function in a transaction.

    Usable bare (``@transactional``) or with options
    (``@transactional(manager_name="reporting")``).

    Parameters
    ----------
    target : type or callable, optional
        The decorated class or function (supplied by the bare form).
    manager_name : str, optional
        Name of the transaction manager governing the target. When omitted
        the registry's default manager is used.

    Returns
    -------
    type or callable
        The marked class itself, or the transaction-wrapped function.
    """

    def decorate(obj):
        if inspect.isclass(obj):
            setattr(obj, MARKER_ATTRIBUTE, TransactionMarker(manager_name))
            return obj
        if callable(obj):
            return _wrap_function(obj, manager_name)
        raise TypeError(f"@transactional cannot be applied to {obj!r}")

    if target is None:
        return decorate
    return decorate(target)


def _wrap_function(func, manager_name: Optional[str]):
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            interceptor = transaction_managers.get(manager_name).interceptor
            return await interceptor.invoke_async(func, *args, **kwargs)

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        interceptor = transaction_managers.get(manager_name).interceptor
        return interceptor.invoke(func, *args, **kwargs)

    return wrapper


def find_marker(cls: type) -> Optional[TransactionMarker]:
    """Return the `TransactionMarker` of `cls` (inherited ones included), or None."""
    marker = getattr(cls, MARKER_ATTRIBUTE, None)
    if isinstance(marker, TransactionMarker):
        return marker
    return None


def scan_components(components: Iterable[Union[type, ModuleType]], proxy_factory) -> List[type]:
    """
    Register every marked class among `components` with `proxy_factory`.

    Runs once at startup. Modules are expanded to the classes defined in them.

    Parameters
    ----------
    components : iterable of type or module
        Candidate component classes, or modules containing them.
    proxy_factory : ProxyFactory
        Factory the marked classes are registered with.

    Returns
    -------
    list[type]
        The classes that carried the marker, in scan order.

    Raises
    ------
    ManagerNotFoundError
        If a marker names a manager that is not registered.
    """
    registered = []
    for cls in _expand(components):
        marker = find_marker(cls)
        if marker is None:
            continue
        proxy_factory.register(cls, marker.manager_name)
        registered.append(cls)
    logger.info("Component scan registered %d transactional class(es)", len(registered))
    return registered


def _expand(components):
    seen = set()
    for component in components:
        if inspect.ismodule(component):
            classes = [
                member
                for _, member in inspect.getmembers(component, inspect.isclass)
                if member.__module__ == component.__name__
            ]
        else:
            classes = [component]
        for cls in classes:
            if cls not in seen:
                seen.add(cls)
                yield cls
