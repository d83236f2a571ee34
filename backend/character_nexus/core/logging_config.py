"""
Logging setup.

Configures the root logger once and attaches a filter that masks sensitive
values passed to log calls through ``extra`` or dict arguments.
"""

import logging
from typing import Any

SENSITIVE_FIELDS = frozenset(
    {
        "api_key",
        "apikey",
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
        "session",
    }
)

REDACTED = "***REDACTED***"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s | %(message)s"


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_FIELDS else _redact(item)
            for key, item in value.items()
        }
    return value


class SensitiveDataFilter(logging.Filter):
    """Mask sensitive keys in record args and extra attributes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, dict):
            record.args = _redact(record.args)
        elif isinstance(record.args, tuple):
            record.args = tuple(_redact(arg) for arg in record.args)

        for field in SENSITIVE_FIELDS:
            if field in record.__dict__:
                setattr(record, field, REDACTED)
        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(isinstance(f, SensitiveDataFilter) for h in root.handlers for f in h.filters):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler.addFilter(SensitiveDataFilter())
        root.addHandler(handler)

    # Engine echo is controlled by DEBUG; keep uvicorn access logs quiet
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
