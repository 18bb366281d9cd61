"""FastAPI application factory for the HTTP service shell.

This module defines API application composition: middleware chain, health
route, delegated auth routes, catch-all not-found route and error handlers.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.db import DatabaseHealthPort

from .errors import api_not_found_response, api_register_error_handlers
from .middleware import api_install_middleware
from .routers import api_create_health_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    auth_router: APIRouter | None = None,
    started_at_monotonic: float | None = None,
    lifespan: Any = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings.
        db_health_service: Database health service used by the health endpoint.
        auth_router: External authentication route group mounted at `/api`.
        started_at_monotonic: Process start reading used for uptime reporting.
        lifespan: Optional lifespan context manager factory.

    Returns:
        FastAPI: Framework application instance with routes and handlers attached.

    Raises:
        ValueError: Raised when required dependencies are missing.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    application = FastAPI(title="Auth API", lifespan=lifespan)
    api_install_middleware(application, settings)
    api_register_error_handlers(application, settings)

    application.include_router(
        api_create_health_router(
            settings=settings,
            db_health_service=db_health_service,
            started_at_monotonic=started_at_monotonic,
        )
    )
    if auth_router is not None:
        application.include_router(auth_router, prefix="/api")

    def api_route_not_found(request: Request) -> JSONResponse:
        """Answer any request no earlier route matched.

        Returns:
            JSONResponse: Fixed not-found envelope with HTTP 404.
        """

        _ = request
        return api_not_found_response()

    # Must stay last: routes resolve first-match-wins in registration order.
    # A plain Starlette route without a method list matches every HTTP method.
    application.add_route("/{unmatched_path:path}", api_route_not_found, include_in_schema=False)

    return application
