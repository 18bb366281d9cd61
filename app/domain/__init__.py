"""Domain models used across application layer boundaries."""

from .errors import GENERIC_ERROR_MESSAGE, MalformedBodyError, PayloadTooLargeError, ServiceError
from .models import DatabaseConnectionState, DatabaseHealth, ServiceHealth

__all__ = [
    "DatabaseConnectionState",
    "DatabaseHealth",
    "GENERIC_ERROR_MESSAGE",
    "MalformedBodyError",
    "PayloadTooLargeError",
    "ServiceError",
    "ServiceHealth",
]
