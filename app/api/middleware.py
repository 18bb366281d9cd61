"""Request middleware chain for the HTTP service shell.

The chain runs, from outermost to innermost: security headers, cross-origin
policy, error boundary, JSON body parsing, static assets. Starlette wraps the
most recently added middleware around the earlier ones, so
`api_install_middleware` adds them in reverse.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Final
from urllib.parse import unquote

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import FileResponse, Response

from app.config import AppSettings
from app.domain import MalformedBodyError, PayloadTooLargeError

from .errors import ErrorBoundaryMiddleware

SECURITY_HEADERS: Final[dict[str, str]] = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;form-action 'self';"
        "frame-ancestors 'self';img-src 'self' data:;object-src 'none';script-src 'self';"
        "script-src-attr 'none';style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

_STATIC_METHODS: Final[frozenset[str]] = frozenset({"GET", "HEAD"})


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add hardening headers to every response without touching the request.

    With a wildcard cross-origin policy, responses to requests that carry no
    `Origin` header still advertise `Access-Control-Allow-Origin: *`.
    """

    def __init__(self, app, allow_any_origin: bool = False):
        super().__init__(app)
        self._allow_any_origin = allow_any_origin

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header_name, header_value in SECURITY_HEADERS.items():
            response.headers.setdefault(header_name, header_value)
        if self._allow_any_origin:
            response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response


def api_is_json_content_type(content_type: str | None) -> bool:
    """Return whether a Content-Type header denotes a JSON body.

    Args:
        content_type: Raw header value, possibly with parameters.

    Returns:
        bool: True for `application/json` and `+json` media types.
    """

    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def api_declared_content_length(request: Request) -> int | None:
    """Return the declared body length, or None when absent or unparsable."""

    raw_length = request.headers.get("content-length")
    if raw_length is None or not raw_length.strip().isdigit():
        return None
    return int(raw_length)


class JsonBodyMiddleware(BaseHTTPMiddleware):
    """Parse JSON request bodies into `request.state.json_body`.

    Bodies larger than `limit_bytes` are rejected before parsing. Other
    content types pass through unread.
    """

    def __init__(self, app, limit_bytes: int):
        super().__init__(app)
        self._limit_bytes = limit_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Decode the body of JSON-typed requests before routing.

        Raises:
            PayloadTooLargeError: Raised when the body exceeds the size limit.
            MalformedBodyError: Raised when a JSON-typed body cannot be decoded.
        """

        if api_is_json_content_type(request.headers.get("content-type")):
            declared_length = api_declared_content_length(request)
            if declared_length is not None and declared_length > self._limit_bytes:
                raise PayloadTooLargeError()
            raw_body = await request.body()
            if len(raw_body) > self._limit_bytes:
                raise PayloadTooLargeError()
            if not raw_body.strip():
                request.state.json_body = {}
            else:
                try:
                    request.state.json_body = json.loads(raw_body)
                except (UnicodeDecodeError, json.JSONDecodeError) as error:
                    raise MalformedBodyError() from error
        return await call_next(request)


class StaticAssetMiddleware(BaseHTTPMiddleware):
    """Serve files from the public asset directory ahead of routing.

    A request short-circuits only when its path names an existing file inside
    the directory (directories resolve to their `index.html`). Everything else
    passes through unchanged.
    """

    def __init__(self, app, directory: str):
        super().__init__(app)
        self._directory = Path(directory).resolve()

    def static_resolve_file(self, url_path: str) -> Path | None:
        """Resolve a URL path to a servable file inside the asset directory.

        Args:
            url_path: Raw request path.

        Returns:
            Path | None: File path, or None when nothing should be served.
        """

        if not self._directory.is_dir():
            return None
        relative_path = unquote(url_path).lstrip("/")
        if "\x00" in relative_path:
            return None
        candidate = (self._directory / relative_path).resolve()
        if candidate != self._directory and self._directory not in candidate.parents:
            return None
        if candidate.is_dir():
            candidate = candidate / "index.html"
        if not candidate.is_file():
            return None
        return candidate

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method in _STATIC_METHODS:
            file_path = self.static_resolve_file(request.url.path)
            if file_path is not None:
                return FileResponse(file_path)
        return await call_next(request)


def api_install_middleware(application: FastAPI, settings: AppSettings) -> None:
    """Install the fixed middleware chain on the application.

    Args:
        application: FastAPI application instance.
        settings: Runtime settings for CORS, static assets and error detail.
    """

    application.add_middleware(StaticAssetMiddleware, directory=settings.static_directory)
    application.add_middleware(JsonBodyMiddleware, limit_bytes=settings.request_body_limit_bytes)
    application.add_middleware(ErrorBoundaryMiddleware, settings=settings)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(SecurityHeadersMiddleware, allow_any_origin="*" in settings.cors_allow_origins)
