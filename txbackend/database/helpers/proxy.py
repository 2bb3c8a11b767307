"""
Transactional Proxies
=====================

``ProxyFactory`` turns instances of registered transactional classes into
``TransactionalProxy`` objects. A proxy forwards everything to the real
object, except that each public method call is routed through the
transaction interceptor of the manager the class is bound to.

Every public callable attribute is intercepted, including functions stored
on the instance. Private and dunder attributes, classes and non-callable
values (data attributes, property results) are returned untouched. Calls the real
object makes on ``self`` do not go through the proxy; they already run
inside the transaction opened by the outer call.

Python looks special methods up on the type, never through ``__getattr__``.
For a class implementing protocol methods (``__len__``, ``__iter__``,
``__call__``, ``__enter__`` ...) the factory builds a ``TransactionalProxy``
subclass defining the same methods, so ``len(proxy)``, ``iter(proxy)`` or
``with proxy:`` work as on the real object. ``__call__`` is the public call
protocol and runs through the interceptor; the others are forwarded as is.
"""

import functools
import logging
from typing import Any, Dict, Optional

from txbackend.database.helpers.transactionManagement import (
    TransactionInterceptor,
    TransactionManagerRegistry,
    transaction_managers,
)

logger = logging.getLogger(__name__)


class TransactionalProxy:
    """
    Call-forwarding wrapper around a transactional object.

    Parameters
    ----------
    target : object
        The real object.
    interceptor : TransactionInterceptor
        Interceptor wrapping the target's public method calls.
    """

    __slots__ = ("__target", "__interceptor")

    def __init__(self, target: Any, interceptor: TransactionInterceptor):
        object.__setattr__(self, "_TransactionalProxy__target", target)
        object.__setattr__(self, "_TransactionalProxy__interceptor", interceptor)

    def _get_class(self):
        return type(self.__target)

    # isinstance() and type checks against the target's class succeed
    __class__ = property(_get_class)

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self.__target, name)
        if name.startswith("_"):
            return attr
        if callable(attr) and not isinstance(attr, type):
            return self.__interceptor.wrap(attr)
        return attr

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self.__target, name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self.__target, name)

    def __dir__(self):
        return dir(self.__target)

    def __repr__(self) -> str:
        return repr(self.__target)

    def __str__(self) -> str:
        return str(self.__target)

    def __eq__(self, other: Any) -> bool:
        return self.__target == unwrap(other)

    def __hash__(self) -> int:
        return hash(self.__target)


def unwrap(obj: Any) -> Any:
    """Return the real object behind a `TransactionalProxy`, or `obj` itself."""
    if issubclass(type(obj), TransactionalProxy):
        return object.__getattribute__(obj, "_TransactionalProxy__target")
    return obj


PROTOCOL_METHODS = (
    "__len__",
    "__bool__",
    "__iter__",
    "__reversed__",
    "__next__",
    "__contains__",
    "__getitem__",
    "__setitem__",
    "__delitem__",
    "__enter__",
    "__exit__",
    "__aiter__",
    "__anext__",
    "__aenter__",
    "__aexit__",
    "__call__",
)
"""Special methods a proxy type mirrors when the target class defines them."""

INTERCEPTED_PROTOCOL_METHODS = frozenset({"__call__"})
"""Mirrored special methods that run through the interceptor."""


def _forwarding_method(name: str):
    def method(self, *args, **kwargs):
        return getattr(unwrap(self), name)(*args, **kwargs)

    method.__name__ = name
    return method


def _intercepting_method(name: str):
    def method(self, *args, **kwargs):
        interceptor = object.__getattribute__(self, "_TransactionalProxy__interceptor")
        return interceptor.wrap(getattr(unwrap(self), name))(*args, **kwargs)

    method.__name__ = name
    return method


def _defines(cls: type, name: str) -> bool:
    for klass in cls.__mro__:
        if name in vars(klass):
            return vars(klass)[name] is not None
    return False


@functools.lru_cache(maxsize=None)
def proxy_type_for(cls: type) -> type:
    """
    Return the proxy type for instances of `cls`.

    `TransactionalProxy` itself when `cls` defines none of the
    `PROTOCOL_METHODS`, otherwise a subclass mirroring the ones it defines.
    """
    namespace = {"__slots__": ()}
    for name in PROTOCOL_METHODS:
        if not _defines(cls, name):
            continue
        if name in INTERCEPTED_PROTOCOL_METHODS:
            namespace[name] = _intercepting_method(name)
        else:
            namespace[name] = _forwarding_method(name)
    if len(namespace) == 1:
        return TransactionalProxy
    return type(f"{cls.__name__}Proxy", (TransactionalProxy,), namespace)


class ProxyFactory:
    """
    Builds transactional proxies for registered classes.

    Parameters
    ----------
    registry : TransactionManagerRegistry, optional
        Registry the bound managers are looked up in. Defaults to the
        process-wide `transaction_managers`.
    """

    def __init__(self, registry: Optional[TransactionManagerRegistry] = None):
        self.registry = registry if registry is not None else transaction_managers
        self._bindings: Dict[type, TransactionInterceptor] = {}

    def register(self, cls: type, manager_name: Optional[str] = None) -> None:
        """
        Bind `cls` to the manager registered under `manager_name`.

        Raises
        ------
        ManagerNotFoundError
            If the manager does not exist.
        """
        manager = self.registry.get(manager_name)
        self._bindings[cls] = manager.interceptor
        proxy_type_for(cls)
        logger.debug("Bound %s to transaction manager '%s'", cls.__qualname__, manager.name)

    def is_registered(self, cls: type) -> bool:
        return self._interceptor_for(cls) is not None

    def wrap(self, instance: Any) -> Any:
        """Return a proxy for `instance` if its class is registered, else `instance`."""
        if issubclass(type(instance), TransactionalProxy):
            return instance
        interceptor = self._interceptor_for(type(instance))
        if interceptor is None:
            return instance
        return proxy_type_for(type(instance))(instance, interceptor)

    def create(self, cls: type, *args, **kwargs) -> Any:
        """Instantiate `cls` and hand back its proxy."""
        return self.wrap(cls(*args, **kwargs))

    def _interceptor_for(self, cls: type) -> Optional[TransactionInterceptor]:
        for klass in cls.__mro__:
            interceptor = self._bindings.get(klass)
            if interceptor is not None:
                return interceptor
        return None
