"""Log formatting for provider actions (JSON or text, on stderr)."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import LoggingConfig
from .exceptions import CloudAPIError, ProviderError

_ACTION_FIELDS = ("action", "region", "resource_id", "elapsed_seconds", "count")


def action_context(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the action fields and any attached provider error from a record.

    Loggers attach the failing exception as ``extra={"error": exc}``. A
    ProviderError contributes ``error_type``, and a CloudAPIError also
    contributes the AWS ``error_code``.
    """
    context: dict[str, Any] = {}
    for key in _ACTION_FIELDS:
        val = getattr(record, key, None)
        if val is not None:
            context[key] = val

    error = getattr(record, "error", None)
    if isinstance(error, ProviderError):
        context["error_type"] = type(error).__name__
        if isinstance(error, CloudAPIError) and error.error_code:
            context["error_code"] = error.error_code
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with action context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(action_context(record))

        if record.exc_info and record.exc_info[1]:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with the action context appended in parentheses."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = action_context(record)
        if not context:
            return line
        # keep tracebacks on the lines after the context
        head, sep, tail = line.partition("\n")
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        return f"{head} ({pairs}){sep}{tail}"


def configure_logging(config: LoggingConfig) -> None:
    """Point the root logger at stderr with the configured format and level."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    # stdout carries action results
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if config.format == "json" else TextFormatter())
    root.addHandler(handler)

    for noisy in ("boto3", "botocore", "urllib3", "s3transfer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
