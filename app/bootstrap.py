"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from app.api import create_api_application
from app.api.routers import api_resolve_auth_router
from app.config import AppSettings, config_load_settings
from app.db import DatabaseConnectionPort, SQLAlchemyDatabaseConnection, db_create_engine
from app.observability import observability_configure_logging

logger = logging.getLogger(__name__)


@dataclass
class ApplicationContext:
    """Process-wide resources shared by every request handler.

    Attributes:
        settings: Validated runtime settings.
        database: Database connection collaborator.
        started_at_monotonic: `time.monotonic()` reading taken at construction.
    """

    settings: AppSettings
    database: DatabaseConnectionPort
    started_at_monotonic: float = field(default_factory=time.monotonic)


def bootstrap_create_context(settings: AppSettings | None = None) -> ApplicationContext:
    """Build the application context from settings.

    Args:
        settings: Optional pre-validated settings; loaded from the environment when omitted.

    Returns:
        ApplicationContext: Context holding the database connection.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    engine = db_create_engine(database_url=resolved_settings.database_url)
    return ApplicationContext(settings=resolved_settings, database=SQLAlchemyDatabaseConnection(engine=engine))


def bootstrap_create_lifespan(context: ApplicationContext):
    """Create the lifespan handler that owns the context's resources.

    The database connection is attempted on startup without gating the
    listener; shutdown closes it.

    Args:
        context: Application context whose resources are managed.

    Returns:
        Callable: Lifespan context manager factory for FastAPI.
    """

    @asynccontextmanager
    async def lifespan(_application: FastAPI) -> AsyncIterator[None]:
        await run_in_threadpool(context.database.db_connect)
        logger.info(
            "Server running on port %s (%s)",
            context.settings.application_port,
            context.settings.environment_name,
        )
        try:
            yield
        finally:
            logger.info("Server shutting down")
            await run_in_threadpool(context.database.db_close)

    return lifespan


def bootstrap_create_application(context: ApplicationContext | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        context: Optional prebuilt context; created from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_context = context or bootstrap_create_context()
    settings = resolved_context.settings
    observability_configure_logging(settings.log_level, settings.log_format)
    return create_api_application(
        settings=settings,
        db_health_service=resolved_context.database,
        auth_router=api_resolve_auth_router(settings.auth_router),
        started_at_monotonic=resolved_context.started_at_monotonic,
        lifespan=bootstrap_create_lifespan(resolved_context),
    )
