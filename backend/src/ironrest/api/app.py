"""FastAPI application."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ironrest.api.routes import create_rest_router
from ironrest.bindings import BindingsLoader
from ironrest.dispatch import RestRegistry, RestSettings
from ironrest.hooks import import_hook_modules
from ironrest.persistence import DatabaseConfig, StoreFactory

logger = logging.getLogger(__name__)


def create_app(
    registry: RestRegistry | None = None,
    store_factory: StoreFactory | None = None,
    bindings_path: Path | None = None,
) -> FastAPI:
    """Build the API app around ``registry``.

    Without arguments everything comes from the environment:
    IRONREST_PREFIX / IRONREST_ACCESS_TOKEN for the registry settings,
    DATABASE_URL / IRONREST_DB_PATH for the stores, IRONREST_HOOK_MODULES
    for hook registration and IRONREST_BINDINGS for the collections to
    attach on startup.
    """
    registry = registry or RestRegistry(RestSettings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Attach configured collections on startup, release stores on shutdown."""
        factory = store_factory
        import_hook_modules(os.environ.get("IRONREST_HOOK_MODULES"))

        path = bindings_path or os.environ.get("IRONREST_BINDINGS")
        if path:
            factory = factory or StoreFactory(DatabaseConfig.from_env())
            BindingsLoader(Path(path)).attach_all(registry, factory)

        if not registry.settings.access_token:
            logger.warning(
                "IRONREST_ACCESS_TOKEN is empty; every collection request will be rejected"
            )

        yield

        if factory:
            factory.close()

    app = FastAPI(title="IronREST", lifespan=lifespan)
    app.state.registry = registry

    origins = os.environ.get("IRONREST_CORS_ORIGINS")
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(create_rest_router(registry))
    return app


app = create_app()
