# src/dailyreps_backup/main.py
"""Main entry point for the DailyReps backup server."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from dailyreps_backup.api.v1 import (
    admin_router,
    backup_router,
    register_router,
    system_router,
    users_router,
)
from dailyreps_backup.core.errors import register_exception_handlers
from dailyreps_backup.core.logging import configure_logging
from dailyreps_backup.core.settings import Settings, get_settings
from dailyreps_backup.db.session import build_engine, create_tables
from dailyreps_backup.services.backup_service import BackupService
from dailyreps_backup.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: RecordStore | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration to use; defaults to the environment settings.
        store: Pre-built record store. When omitted, one is created at startup
            from `settings.database_url` and its tables are created.

    Returns:
        A configured FastAPI instance.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level, settings.log_json)
        owns_engine = store is None
        record_store = store
        if record_store is None:
            engine = build_engine(settings.effective_database_url, echo=settings.sql_debug)
            create_tables(engine)
            record_store = RecordStore(engine)

        app.state.backup_service = BackupService(record_store, settings)
        logger.info(
            "%s %s started (environment: %s)",
            settings.app_name,
            settings.app_version,
            settings.environment,
        )
        if not settings.admin_enabled:
            logger.info("ADMIN_SECRET_KEY not set; admin statistics disabled")
        try:
            yield
        finally:
            if owns_engine:
                record_store.engine.dispose()
            logger.info("Shutting down")

    app = FastAPI(
        title=settings.app_name,
        description="Zero-knowledge encrypted backup server",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(GZipMiddleware)
    register_exception_handlers(app)

    app.include_router(register_router, prefix="/api")
    app.include_router(backup_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(admin_router)
    app.include_router(system_router)
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dailyreps_backup.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
