"""Typed domain models shared across runtime layers.

Health values are constructed fresh for each probe and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class DatabaseConnectionState(IntEnum):
    """Numeric readiness codes of the process-wide database connection."""

    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3


class ServiceHealth(str, Enum):
    """Overall service status reported by the health endpoint."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class DatabaseHealth:
    """Database section of the health payload.

    Attributes:
        status: `connected`, `disconnected` or `error`.
        state: Optional numeric connection state code.
        error: Optional probe failure message.
    """

    status: str
    state: int | None = None
    error: str | None = None

    @property
    def is_connected(self) -> bool:
        """Return whether the database is reachable."""

        return self.status == "connected"

    def to_payload(self) -> dict[str, object]:
        """Render the section as a JSON-compatible mapping.

        Returns:
            dict[str, object]: Payload with optional keys omitted when unset.
        """

        payload: dict[str, object] = {"status": self.status}
        if self.state is not None:
            payload["state"] = self.state
        if self.error is not None:
            payload["error"] = self.error
        return payload
