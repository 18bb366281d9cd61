"""Typed interfaces for database-layer services.

All SQL and engine access must remain in the db package and its submodules.
"""

from typing import Protocol

from app.domain import DatabaseConnectionState, DatabaseHealth


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_state(self) -> DatabaseConnectionState:
        """Return the current connection state without touching the network.

        Returns:
            DatabaseConnectionState: Current numeric readiness state.
        """

    def db_check_health(self) -> DatabaseHealth:
        """Check database connectivity and return the health section payload.

        Returns:
            DatabaseHealth: Database health status payload.

        Raises:
            ConnectionError: Raised when the connectivity probe fails.
        """


class DatabaseConnectionPort(DatabaseHealthPort, Protocol):
    """Port definition for the process-wide database connection lifecycle."""

    def db_connect(self) -> DatabaseConnectionState:
        """Establish the connection; failures are recorded, not raised.

        Returns:
            DatabaseConnectionState: State reached after the attempt.
        """

    def db_close(self) -> None:
        """Release pooled connections and mark the connection closed."""
