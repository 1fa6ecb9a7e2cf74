"""Structured logging configuration for the HR Portal access service.

Environment variables:
    HR_LOG_FORMAT  -- ``json`` for structured JSON output, ``text`` for human-readable (default).
    HR_LOG_LEVEL   -- Python log level name (default: ``INFO``).
"""

from __future__ import annotations

import logging
import os
import traceback
from typing import Any

_STRUCTURED_FIELDS = (
    "request_id",
    "path",
    "method",
    "status_code",
    "duration_ms",
    "action",
    "reason",
    "redirect_to",
)


def _is_json_mode() -> bool:
    """Return True when structured JSON logging is requested."""
    return os.environ.get("HR_LOG_FORMAT", "text").lower() == "json"


def _get_log_level() -> int:
    """Return the numeric log level from HR_LOG_LEVEL (default INFO)."""
    name = os.environ.get("HR_LOG_LEVEL", "INFO").upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter that emits one JSON object per log line.

    Uses ``pythonjsonlogger`` under the hood and lifts the request and
    audit fields (request_id, path, method, status_code, duration_ms,
    action, reason, redirect_to) onto the output when present.
    """

    def __init__(self) -> None:
        super().__init__()
        from pythonjsonlogger.json import JsonFormatter

        self._inner = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        extras: dict[str, Any] = {}
        for key in _STRUCTURED_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                extras[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            extras["traceback"] = traceback.format_exception(*record.exc_info)
            # Keep the traceback out of the message text.
            record.exc_info = None
            record.exc_text = None

        for k, v in extras.items():
            setattr(record, k, v)

        return self._inner.format(record)


def setup_logging() -> None:
    """Configure the root logger according to HR_LOG_FORMAT and HR_LOG_LEVEL."""
    level = _get_log_level()
    root = logging.getLogger()
    root.setLevel(level)

    # Remove any existing handlers so we don't double-log during tests.
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if _is_json_mode():
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    root.addHandler(handler)


def log_startup_info(role_count: int) -> None:
    """Emit a structured startup log line with service configuration."""
    import hrportal

    logger = logging.getLogger("hrportal")
    logger.info(
        "HR Portal access service started",
        extra={
            "version": hrportal.__version__,
            "auth_provider": os.environ.get("HR_AUTH_PROVIDER", "api_key"),
            "rate_limit_config": os.environ.get("HR_RATE_LIMIT", "none"),
            "access_table": os.environ.get("HR_ACCESS_TABLE_PATH") or "built-in",
            "role_count": role_count,
        },
    )
