"""
Logging configuration for the transfer tools.

Modules log through ``logging.getLogger(__name__)`` and attach structured
context with ``extra={...}``. ``setup_logging`` decides how those records
are rendered: a readable console line with the context appended as
``key=value`` pairs, or one JSON object per line.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord carries; anything else came in through extra={...}
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the structured context attached to a log record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter: ``time [LEVEL] logger: message | k=v``."""

    def __init__(self):
        super().__init__(fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " | " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


class JSONFormatter(logging.Formatter):
    """Structured formatter: one JSON object per record, context under "context"."""

    def __init__(self, app_name: str = "es2ch"):
        super().__init__()
        self.app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        context = record_context(record)
        if context:
            log_data["context"] = context
        return json.dumps(log_data, default=str, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit JSON lines instead of console lines
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    root_logger.addHandler(handler)

    # Client libraries log every HTTP request at INFO
    for noisy in ("urllib3", "elastic_transport", "elasticsearch", "clickhouse_connect"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
