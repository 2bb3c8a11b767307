"""
Composition root.

Wires the database layer together once at startup:

1. registers a transaction manager wrapping the engine's connection pool,
2. scans the service module for ``@transactional`` classes and binds them
   to their managers,
3. builds the DAOs and hands out the services as transactional proxies.

Nothing here runs per request.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from txbackend.crypt.passwords import PasswordHasher
from txbackend.database.config.config import settings
from txbackend.database.config.connection_engine import metadata
from txbackend.database.core import services as service_module
from txbackend.database.core.services import ProfileService, RegistrationService
from txbackend.database.daos.profile_dao import UserProfileDao
from txbackend.database.daos.user_dao import UserDao
from txbackend.database.helpers.connection_source import EngineConnectionSource
from txbackend.database.helpers.marker import scan_components
from txbackend.database.helpers.proxy import ProxyFactory
from txbackend.database.helpers.sql_executor import SqlExecutor
from txbackend.database.helpers.transactionManagement import TransactionManager, TransactionManagerRegistry

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """The wired application services and the infrastructure behind them."""

    registration: RegistrationService
    profiles: ProfileService
    manager: TransactionManager
    registry: TransactionManagerRegistry
    proxy_factory: ProxyFactory
    executor: SqlExecutor


def initialize_schema(engine: Engine) -> None:
    """Create every table known to the shared metadata (idempotent)."""
    metadata.create_all(engine)


def build_services(
    engine: Engine,
    registry: Optional[TransactionManagerRegistry] = None,
    hasher: Optional[PasswordHasher] = None,
) -> Services:
    """
    Wire the services on top of `engine`.

    Parameters
    ----------
    engine : Engine
        Pooled engine used as the connection source.
    registry : TransactionManagerRegistry, optional
        Registry to register the default manager in. A fresh registry whose
        default name is `settings.DEFAULT_MANAGER_NAME` is used when omitted.
    hasher : PasswordHasher, optional
        Password hasher for registrations. Defaults to one using
        `settings.PASSWORD_HASH_ROUNDS`.

    Returns
    -------
    Services
        Proxied services plus the objects they were built from.
    """
    if registry is None:
        registry = TransactionManagerRegistry(default_name=settings.DEFAULT_MANAGER_NAME)
    if hasher is None:
        hasher = PasswordHasher(rounds=settings.PASSWORD_HASH_ROUNDS)
    source = EngineConnectionSource(engine)
    manager = registry.register(registry.default_name, source)

    proxy_factory = ProxyFactory(registry)
    scan_components([service_module], proxy_factory)

    executor = SqlExecutor(source)
    profiles = proxy_factory.create(ProfileService, UserProfileDao(executor))
    registration = proxy_factory.create(RegistrationService, UserDao(executor), profiles, hasher)
    logger.info("Services wired on transaction manager '%s'", manager.name)
    return Services(
        registration=registration,
        profiles=profiles,
        manager=manager,
        registry=registry,
        proxy_factory=proxy_factory,
        executor=executor,
    )
