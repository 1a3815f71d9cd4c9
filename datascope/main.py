from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from datascope.db.filters import install_data_scope, uninstall_data_scope
from datascope.db.init_db import init_db
from datascope.db.session import SessionLocal, engine
from datascope.logging_config import configure_app_logging
from datascope.routers import admin, employees
from datascope.scope.cache import InMemoryScopeCache
from datascope.scope.config import load_scope_config
from datascope.scope.resolver import ScopeResolver
from datascope.scope.store import SqlScopeStore
from datascope.security.dependencies import bind_scope_user
from datascope.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        config_path = settings.resolved_scope_config_path()
        config = load_scope_config(config_path)
        logger.info("Loaded data scope config: %s", config_path)

        init_db()
        logger.info("Database initialized (tables ensured + seed if needed)")

        ttl = settings.cache_ttl_seconds if settings.cache_ttl_seconds is not None else config.model.cache.ttl_seconds
        cache = InMemoryScopeCache(ttl_seconds=ttl)
        resolver = ScopeResolver(SqlScopeStore(SessionLocal), cache)
        listener = install_data_scope(engine, resolver, config)

        app.state.scope_config = config
        app.state.scope_cache = cache
        app.state.scope_resolver = resolver

        yield

        # Shutdown
        uninstall_data_scope(engine, listener)

    # Global dependency: every request runs with a resolved UserContext.
    app = FastAPI(dependencies=[Depends(bind_scope_user)], lifespan=lifespan)

    app.include_router(employees.router)
    app.include_router(admin.router)

    return app


app = create_app()
