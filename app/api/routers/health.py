"""Health endpoint router composition for app and database checks."""

from __future__ import annotations

import gc
import resource
import time
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.db import DatabaseHealthPort
from app.domain import DatabaseHealth, ServiceHealth


def api_format_timestamp(moment: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision.

    Args:
        moment: Timezone-aware datetime.

    Returns:
        str: Timestamp such as `2024-05-01T12:00:00.000Z`.
    """

    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def api_collect_memory_counters() -> dict[str, int]:
    """Collect process memory counters from the interpreter and the OS.

    Only constant-time counters are read; nothing walks the heap.

    Returns:
        dict[str, int]: Peak resident set size and garbage collector counters.
    """

    usage = resource.getrusage(resource.RUSAGE_SELF)
    generation_0, generation_1, generation_2 = gc.get_count()
    return {
        "peak_rss_kb": int(usage.ru_maxrss),
        "gc_collections": sum(generation_stats["collections"] for generation_stats in gc.get_stats()),
        "gc_generation_0": generation_0,
        "gc_generation_1": generation_1,
        "gc_generation_2": generation_2,
    }


def api_create_health_router(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    started_at_monotonic: float | None = None,
) -> APIRouter:
    """Create health-check router with app and database connectivity status.

    Args:
        settings: Runtime settings providing the environment label.
        db_health_service: DB-layer health service interface.
        started_at_monotonic: `time.monotonic()` reading taken at startup.

    Returns:
        APIRouter: Router exposing `/api/health` endpoint.

    Raises:
        ValueError: Raised when db_health_service is invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")

    started_at = time.monotonic() if started_at_monotonic is None else started_at_monotonic
    router = APIRouter(prefix="/api", tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and database health state.

        Returns:
            JSONResponse: HTTP 200 when the database is connected, 503 otherwise.
        """

        try:
            database_health = db_health_service.db_check_health()
        except ConnectionError as error:
            database_health = DatabaseHealth(
                status="error",
                state=int(db_health_service.db_connection_state()),
                error=str(error),
            )

        service_health = ServiceHealth.HEALTHY if database_health.is_connected else ServiceHealth.UNHEALTHY
        payload = {
            "status": service_health.value,
            "timestamp": api_format_timestamp(datetime.now(timezone.utc)),
            "uptime": max(0.0, time.monotonic() - started_at),
            "memory": api_collect_memory_counters(),
            "environment": settings.environment_name,
            "database": database_health.to_payload(),
        }
        status_code = (
            status.HTTP_200_OK if service_health is ServiceHealth.HEALTHY else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return JSONResponse(content=payload, status_code=status_code)

    return router
