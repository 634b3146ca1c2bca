"""Structured JSON logging for the service and the management CLI."""

import json
import logging
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Optional

MASK = "***"

# Context keys whose values are credentials or password material
SENSITIVE_KEYS = frozenset(
    {
        "secret",
        "x-admin-key",
        "admin_key",
        "authorization",
        "legacy_admin_key",
        "password",
        "password_hash",
    }
)


def redact(value: Any) -> Any:
    """
    Replace credential values in a log context with ``MASK``.

    Walks nested mappings and lists; key matching is case-insensitive.
    """
    if isinstance(value, Mapping):
        return {
            k: MASK if str(k).lower() in SENSITIVE_KEYS else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    return value


def _json_default(value: Any) -> Any:
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return str(value)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per log line.

    Fields: ``timestamp`` (UTC ISO 8601), ``level``, ``logger``, ``message``,
    ``environment`` when configured, ``correlation_id`` when the request
    logger passed one, then the redacted ``context`` dict merged in. Errors
    carry ``exception``; DEBUG records carry their source location.
    """

    def __init__(self, environment: Optional[str] = None) -> None:
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.environment:
            log_data["environment"] = self.environment

        if hasattr(record, "correlation_id"):
            log_data["correlation_id"] = record.correlation_id

        context = getattr(record, "context", None)
        if isinstance(context, Mapping):
            log_data.update(redact(context))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.levelno == logging.DEBUG:
            log_data["file"] = record.pathname
            log_data["line"] = record.lineno
            log_data["function"] = record.funcName

        return json.dumps(log_data, default=_json_default)


def configure_logging(log_level: str = "INFO", environment: Optional[str] = None) -> None:
    """
    Send JSON logs to stdout from the root logger.

    Args:
        log_level: Level name, usually ``Settings.log_level``
        environment: Deployment name stamped on every line
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(JSONFormatter(environment))
    root_logger.addHandler(console_handler)

    root_logger.info(
        "Logging configured",
        extra={"context": {"log_level": log_level}},
    )


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, typically ``get_logger(__name__)``."""
    return logging.getLogger(name)
