"""Logging configuration for the service process.

One stream handler is installed on the root logger, formatted either as
human-readable text or as one JSON object per line.
"""

import json
import logging
from datetime import datetime, timezone

_HANDLER_NAME = "app.observability"
_EXTRA_FIELDS = ("path", "method", "status_code")


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            value = record.__dict__.get(key)
            if value is not None:
                log_payload[key] = value
        if record.exc_info:
            log_payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_payload, ensure_ascii=False)


def observability_configure_logging(level: str = "INFO", fmt: str = "text") -> logging.Handler:
    """Install the process log handler on the root logger.

    Args:
        level: Logging level name; unknown names fall back to INFO.
        fmt: `json` for structured output, anything else for text.

    Returns:
        logging.Handler: The installed handler, replacing any earlier one.
    """

    root_logger = logging.getLogger()
    for existing_handler in list(root_logger.handlers):
        if existing_handler.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing_handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
