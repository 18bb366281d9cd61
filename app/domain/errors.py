"""Project-native typed exceptions surfaced through the error envelope."""

from __future__ import annotations

GENERIC_ERROR_MESSAGE = "Something went wrong!"


class ServiceError(Exception):
    """Request failure carrying an explicit HTTP status code.

    Attributes:
        message: Human-readable message rendered in the error envelope.
        status_code: HTTP status code for the response.
    """

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, status_code: int = 500):
        if not 400 <= status_code <= 599:
            raise ValueError(f"status_code must be an HTTP error status, got {status_code}")
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MalformedBodyError(ServiceError):
    """JSON request body could not be decoded."""

    def __init__(self, message: str = "Malformed JSON request body"):
        super().__init__(message=message, status_code=400)


class PayloadTooLargeError(ServiceError):
    """Request body exceeds the configured size limit."""

    def __init__(self, message: str = "Request entity too large"):
        super().__init__(message=message, status_code=413)
