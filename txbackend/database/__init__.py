"""
The `database` package is responsible for all interactions with the application's database.
It provides configuration, entity definitions, data access, declarative transaction
management and the services built on top of them.

Contents:
    - config:
        Settings and the pooled SQLAlchemy engine used as connection source.

    - entities:
        SQLAlchemy entity models representing the database tables.

    - daos:
        Data Access Objects issuing statements through the `SqlExecutor`.

    - core:
        Transactional services and the composition root that wires them.

    - helpers:
        Transaction context, interceptor, proxies, the `@transactional`
        marker and the SQL executor.
"""
