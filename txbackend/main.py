"""
FastAPI application bootstrap with: \n
- Lifespan-managed wiring of the transactional services (schema, managers, proxies) \n
- Logging configured from settings \n
- CORS configured for the frontend \n

Environment contract (from `settings`): \n
- LOG_LEVEL: root logging level. \n
- FRONTEND_URL: allowed CORS origin. \n
- DB_*: database URL parts and pool sizing (see `txbackend.database.config.config`). \n
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from txbackend.api.fast_api import router
from txbackend.crypt.passwords import PasswordHasher
from txbackend.database.config.config import settings
from txbackend.database.config.connection_engine import connection_engine
from txbackend.database.core.container import build_services, initialize_schema
from txbackend.database.helpers.transactionManagement import TransactionManagerRegistry

logger = logging.getLogger(__name__)


def create_app(
    engine: Optional[Engine] = None,
    registry: Optional[TransactionManagerRegistry] = None,
    hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    engine : Engine, optional
        Engine to serve from. Defaults to the settings-driven `connection_engine`.
    registry : TransactionManagerRegistry, optional
        Registry the default transaction manager is registered in.
    hasher : PasswordHasher, optional
        Password hasher handed to the registration service.

    Returns
    -------
    FastAPI
        The application; services are wired when its lifespan starts.
    """
    engine = engine if engine is not None else connection_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        App lifespan manager.

        Notes
        ------------
        - On startup: create the tables, register the transaction manager,
          scan the services and attach the proxies to `app.state.services`.
        - On shutdown: unregister the manager and dispose of the pool.
        """
        logging.basicConfig(level=settings.LOG_LEVEL.upper())
        initialize_schema(engine)
        services = build_services(engine, registry, hasher)
        app.state.services = services
        logger.info("Transactional services ready on %s", engine.url)
        try:
            yield
        finally:
            services.registry.unregister(services.manager.name)
            engine.dispose()
            logger.info("Connection pool disposed")

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()
"""Application served by `uvicorn txbackend.main:app`."""
