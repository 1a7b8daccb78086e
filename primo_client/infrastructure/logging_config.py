"""Structured logging configuration.

Provides JSON log lines for production and human-readable formatting for
development. The package itself only creates module loggers; applications
call setup_logging() once at startup.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class StructuredFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Fields passed via extra={"extra_fields": {...}}
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data)


def setup_logging(use_json: Optional[bool] = None, log_level: Optional[str] = None) -> None:
    """Configure the root logger.

    Parameters:
        use_json: Use JSON formatting (defaults to PRIMO_LOG_JSON)
        log_level: Logging level name (defaults to PRIMO_LOG_LEVEL)
    """
    from primo_client.infrastructure.settings import settings

    if use_json is None:
        use_json = settings.log_json
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if use_json:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
