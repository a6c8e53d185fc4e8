"""
Logging configuration.

JSON output for production, readable text for development. Every record
carries a correlation_id ("system" outside of a request).
"""
import os
import sys
import logging
import json
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.config import dictConfig
from typing import Any, Dict, Optional

# Attributes present on every LogRecord; anything else came in through `extra`
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'exc_info', 'exc_text', 'message', 'correlation_id', 'taskName',
}


# Set per request by CorrelationIDMiddleware
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="system")


class CorrelationIdFilter(logging.Filter):
    """Stamp the current correlation_id on log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", "system"),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s'


def build_logging_config(level: str = "INFO", log_format: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a dictConfig mapping.

    Args:
        level: Root log level
        log_format: 'json' or 'text'; defaults to the LOG_FORMAT env var
    """
    log_format = (log_format or os.getenv('LOG_FORMAT', 'text')).lower()
    formatter = {"()": JSONFormatter} if log_format == 'json' else {
        "format": TEXT_FORMAT,
        "datefmt": '%Y-%m-%d %H:%M:%S',
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "correlation_id": {"()": CorrelationIdFilter},
        },
        "formatters": {
            "default": formatter,
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["correlation_id"],
                "stream": sys.stdout,
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        "loggers": {
            # Reduce noise from third-party libraries
            "uvicorn.access": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
        },
    }


def configure_logging(level: str = "INFO", log_format: Optional[str] = None) -> None:
    dictConfig(build_logging_config(level, log_format))
    if (log_format or os.getenv('LOG_FORMAT', 'text')).lower() == 'json':
        logging.getLogger(__name__).info("Structured JSON logging enabled")
