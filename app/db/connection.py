"""Process-wide database connection with observable readiness state."""

from __future__ import annotations

import logging
import threading

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import DatabaseConnectionState, DatabaseHealth

from .interfaces import DatabaseConnectionPort

logger = logging.getLogger(__name__)


class SQLAlchemyDatabaseConnection(DatabaseConnectionPort):
    """Database connection backed by a SQLAlchemy engine.

    The state transitions mirror a driver-level ready state:
    `disconnected -> connecting -> connected`, and `disconnecting -> disconnected`
    on close. A failed connect leaves the state `disconnected` and keeps the
    error in `last_error`; startup continues regardless.
    """

    def __init__(self, engine: Engine):
        """Initialize the connection wrapper.

        Args:
            engine: SQLAlchemy engine used for connectivity checks.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine
        self._state = DatabaseConnectionState.DISCONNECTED
        self._state_lock = threading.Lock()
        self.last_error: Exception | None = None

    @property
    def engine(self) -> Engine:
        """Return the underlying engine."""

        return self._engine

    def db_connection_label(self) -> str:
        """Return the target database URL for diagnostics.

        Returns:
            str: Rendered engine URL string with the password hidden.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_connection_state(self) -> DatabaseConnectionState:
        return self._state

    def db_connect(self) -> DatabaseConnectionState:
        """Open a first connection and record the resulting state.

        Returns:
            DatabaseConnectionState: `connected` on success, `disconnected` otherwise.
        """

        self._set_state(DatabaseConnectionState.CONNECTING)
        try:
            self._ping()
        except SQLAlchemyError as error:
            self.last_error = error
            self._set_state(DatabaseConnectionState.DISCONNECTED)
            logger.error("Database connection failed for %s: %s", self.db_connection_label(), error)
            return self._state

        self.last_error = None
        self._set_state(DatabaseConnectionState.CONNECTED)
        logger.info("Database connected: %s", self.db_connection_label())
        return self._state

    def db_check_health(self) -> DatabaseHealth:
        """Verify database connectivity using a deterministic lightweight query.

        Returns:
            DatabaseHealth: `connected` with state code, or `disconnected` while closing.

        Raises:
            ConnectionError: Raised when the connectivity probe fails.
        """

        if self._state == DatabaseConnectionState.DISCONNECTING:
            return DatabaseHealth(status="disconnected", state=int(self._state))

        try:
            self._ping()
        except SQLAlchemyError as error:
            self.last_error = error
            self._set_state(DatabaseConnectionState.DISCONNECTED)
            raise ConnectionError("database connectivity check failed") from error

        self._set_state(DatabaseConnectionState.CONNECTED)
        return DatabaseHealth(status="connected", state=int(self._state))

    def db_close(self) -> None:
        self._set_state(DatabaseConnectionState.DISCONNECTING)
        self._engine.dispose()
        self._set_state(DatabaseConnectionState.DISCONNECTED)
        logger.info("Database connection closed")

    def _ping(self) -> None:
        with self._engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def _set_state(self, state: DatabaseConnectionState) -> None:
        with self._state_lock:
            self._state = state
