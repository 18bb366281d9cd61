"""Error envelope rendering and terminal error handling.

Every failure path produces `{"success": false, "message": ...}`; the formatted
traceback is added as `stack` only when the settings enable development mode.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.config import AppSettings
from app.domain import GENERIC_ERROR_MESSAGE, ServiceError

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Route not found"


def api_not_found_response() -> JSONResponse:
    """Build the fixed not-found envelope.

    Returns:
        JSONResponse: HTTP 404 response without diagnostic detail.
    """

    return JSONResponse(
        content={"success": False, "message": NOT_FOUND_MESSAGE},
        status_code=status.HTTP_404_NOT_FOUND,
    )


def api_resolve_error_status(error: Exception) -> tuple[int, str]:
    """Map an exception to the response status code and message.

    Args:
        error: Exception raised while handling a request.

    Returns:
        tuple[int, str]: Status code and client-facing message.
    """

    if isinstance(error, ServiceError):
        return error.status_code, error.message or GENERIC_ERROR_MESSAGE
    if isinstance(error, RequestValidationError):
        return status.HTTP_400_BAD_REQUEST, "Invalid request data"
    if isinstance(error, StarletteHTTPException):
        return error.status_code, str(error.detail or GENERIC_ERROR_MESSAGE)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, str(error) or GENERIC_ERROR_MESSAGE


def api_build_error_response(error: Exception, settings: AppSettings, request: Request | None = None) -> JSONResponse:
    """Log one request failure and render its error envelope.

    Args:
        error: Exception raised while handling a request.
        settings: Runtime settings carrying the development flag.
        request: Optional request used for log context.

    Returns:
        JSONResponse: Error envelope response.
    """

    status_code, message = api_resolve_error_status(error)
    formatted_trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    log_context = {"status_code": status_code}
    if request is not None:
        log_context["path"] = request.url.path
        log_context["method"] = request.method
    logger.error("Request failed: %s\n%s", message, formatted_trace, extra=log_context)

    payload: dict[str, object] = {"success": False, "message": message}
    if settings.is_development:
        payload["stack"] = formatted_trace
    headers = error.headers if isinstance(error, StarletteHTTPException) else None
    return JSONResponse(content=payload, status_code=status_code, headers=headers)


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    """Convert exceptions escaping the inner middleware and routes into envelopes."""

    def __init__(self, app, settings: AppSettings):
        super().__init__(app)
        self._settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as error:  # pylint: disable=broad-exception-caught
            return api_build_error_response(error, self._settings, request)


def api_register_error_handlers(application: FastAPI, settings: AppSettings) -> None:
    """Register framework exception handlers that share the error envelope.

    Args:
        application: FastAPI application instance.
        settings: Runtime settings carrying the development flag.
    """

    async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return api_build_error_response(exc, settings, request)

    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return api_build_error_response(exc, settings, request)

    async def _handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        return api_build_error_response(exc, settings, request)

    application.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    application.add_exception_handler(RequestValidationError, _handle_validation_error)
    application.add_exception_handler(ServiceError, _handle_service_error)
