"""API router package for endpoint composition."""

from .auth import api_resolve_auth_router
from .health import api_create_health_router

__all__ = ["api_create_health_router", "api_resolve_auth_router"]
