"""Resolution of the externally provided authentication route group."""

from __future__ import annotations

from fastapi import APIRouter
from uvicorn.importer import ImportFromStringError, import_from_string

from app.config import SettingsLoadError


def api_resolve_auth_router(import_string: str | None) -> APIRouter:
    """Load the auth router named by a `module:attribute` import string.

    Args:
        import_string: Import string of an `APIRouter`, or None.

    Returns:
        APIRouter: The external router, or an empty router when none is configured.

    Raises:
        SettingsLoadError: Raised when the target cannot be imported or is not a router.
    """

    if import_string is None:
        return APIRouter(tags=["auth"])

    try:
        resolved_router = import_from_string(import_string)
    except ImportFromStringError as error:
        raise SettingsLoadError(f"AUTH_ROUTER could not be imported: {error}") from error

    if not isinstance(resolved_router, APIRouter):
        raise SettingsLoadError(
            f"AUTH_ROUTER must reference a fastapi.APIRouter, got {type(resolved_router).__name__}"
        )
    return resolved_router
