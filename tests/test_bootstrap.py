"""Tests for application bootstrap, lifespan management and auth router wiring."""
# pylint: disable=duplicate-code

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from app.api.routers import api_resolve_auth_router
from app.bootstrap import bootstrap_create_application, bootstrap_create_context
from app.config import AppSettings, SettingsLoadError
from app.domain import DatabaseConnectionState
from app.observability import JSONFormatter, observability_configure_logging

_AUTH_MODULE_SOURCE = '''
from fastapi import APIRouter

from app.domain import ServiceError

router = APIRouter()


@router.post("/login")
def login(payload: dict) -> dict:
    if payload.get("password") != "correct":
        raise ServiceError(message="Invalid credentials", status_code=401)
    return {"success": True, "token": "issued"}


not_a_router = object()
'''


@pytest.fixture(name="auth_module")
def _auth_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write an importable auth router module and put it on `sys.path`.

    Returns:
        str: Module name of the generated auth router module.

    Raises:
        OSError: Raised when the module cannot be written.
    """

    module_name = f"external_auth_routes_{tmp_path.name.replace('-', '_')}"
    (tmp_path / f"{module_name}.py").write_text(_AUTH_MODULE_SOURCE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return module_name


def _build_settings(database_url: str, auth_router: str | None = None) -> AppSettings:
    return AppSettings(
        _env_file=None,
        environment_name="production",
        database_url=database_url,
        static_directory="does-not-exist",
        auth_router=auth_router,
    )


def test_bootstrap_lifespan_connects_and_closes_database() -> None:
    """Connect on startup, report healthy, and close the connection on shutdown.

    Returns:
        None: Assertions validate lifecycle behavior.

    Raises:
        AssertionError: Raised when state transitions are wrong.
    """

    context = bootstrap_create_context(_build_settings("sqlite://"))
    application = bootstrap_create_application(context)

    with TestClient(application) as client:
        assert context.database.db_connection_state() == DatabaseConnectionState.CONNECTED
        response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert context.database.db_connection_state() == DatabaseConnectionState.DISCONNECTED


def test_bootstrap_starts_listener_when_database_is_unreachable(tmp_path: Path) -> None:
    """Serve requests even when the startup connection fails.

    Returns:
        None: Assertions validate non-gated startup.

    Raises:
        AssertionError: Raised when startup fails or health is not degraded.
    """

    context = bootstrap_create_context(_build_settings(f"sqlite:///{tmp_path / 'missing' / 'auth.db'}"))

    with TestClient(bootstrap_create_application(context)) as client:
        health_response = client.get("/api/health")
        missing_response = client.get("/nowhere")

    assert health_response.status_code == 503
    assert health_response.json()["status"] == "unhealthy"
    assert health_response.json()["database"]["status"] == "error"
    assert missing_response.status_code == 404


def test_bootstrap_mounts_external_auth_router_under_api(auth_module: str) -> None:
    """Delegate `/api/*` requests to the configured auth router.

    Returns:
        None: Assertions validate route delegation.

    Raises:
        AssertionError: Raised when delegated routes misbehave.
    """

    settings = _build_settings("sqlite://", auth_router=f"{auth_module}:router")
    client = TestClient(bootstrap_create_application(bootstrap_create_context(settings)))

    accepted_response = client.post("/api/login", json={"password": "correct"})
    rejected_response = client.post("/api/login", json={"password": "wrong"})
    health_response = client.get("/api/health")

    assert accepted_response.json() == {"success": True, "token": "issued"}
    assert rejected_response.status_code == 401
    assert rejected_response.json() == {"success": False, "message": "Invalid credentials"}
    assert health_response.json()["database"]["status"] == "connected"


def test_api_resolve_auth_router_defaults_to_empty_router() -> None:
    """Return an empty router when no import string is configured.

    Returns:
        None: Assertions validate resolution behavior.

    Raises:
        AssertionError: Raised when the fallback router has routes.
    """

    router = api_resolve_auth_router(None)

    assert isinstance(router, APIRouter)
    assert not router.routes


def test_api_resolve_auth_router_rejects_invalid_targets(auth_module: str) -> None:
    """Raise SettingsLoadError for missing modules and non-router attributes.

    Returns:
        None: Assertions validate error behavior.

    Raises:
        AssertionError: Raised when an invalid target is accepted.
    """

    with pytest.raises(SettingsLoadError):
        api_resolve_auth_router("missing_auth_package_for_tests:router")
    with pytest.raises(SettingsLoadError):
        api_resolve_auth_router(f"{auth_module}:missing_attribute")
    with pytest.raises(SettingsLoadError):
        api_resolve_auth_router(f"{auth_module}:not_a_router")


def test_observability_configure_logging_is_idempotent() -> None:
    """Replace the installed handler instead of stacking duplicates.

    Returns:
        None: Assertions validate handler installation.

    Raises:
        AssertionError: Raised when handlers are duplicated.
    """

    root_logger = logging.getLogger()
    original_level = root_logger.level
    try:
        observability_configure_logging("DEBUG", "text")
        handler = observability_configure_logging("WARNING", "json")

        installed = [item for item in root_logger.handlers if item.get_name() == handler.get_name()]
        assert installed == [handler]
        assert isinstance(handler.formatter, JSONFormatter)
        assert root_logger.level == logging.WARNING
    finally:
        root_logger.removeHandler(handler)
        root_logger.setLevel(original_level)


def test_json_formatter_includes_request_context() -> None:
    """Render extra request fields and exceptions into the JSON log line.

    Returns:
        None: Assertions validate formatter output.

    Raises:
        AssertionError: Raised when fields are missing.
    """

    try:
        raise RuntimeError("formatter failure")
    except RuntimeError as error:
        record = logging.LogRecord(
            "app.api.errors", logging.ERROR, __file__, 1, "Request failed", None, (type(error), error, error.__traceback__)
        )
    record.path = "/api/health"
    record.status_code = 500

    rendered = JSONFormatter().format(record)

    assert '"path": "/api/health"' in rendered
    assert '"status_code": 500' in rendered
    assert "formatter failure" in rendered
