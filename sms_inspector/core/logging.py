"""
sms_inspector/core/logging.py

Purpose: Logging configuration

- Standardizes log format
- Controls log levels
- JSON output in production, coloured output in development
- Context tracking (user_id, action, email)
"""

import logging
import sys
import json
from contextvars import ContextVar, Token
from datetime import datetime
from typing import Any, Dict, Optional
from sms_inspector.core.config import settings


CONTEXT_FIELDS = ("user_id", "action", "email")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for production.
    One object per line so log shippers can parse it.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development environment.
    """

    def format(self, record: logging.LogRecord) -> str:
        colors = {
            "DEBUG": "\033[36m",      # Cyan
            "INFO": "\033[32m",       # Green
            "WARNING": "\033[33m",    # Yellow
            "ERROR": "\033[31m",      # Red
            "CRITICAL": "\033[35m",   # Magenta
        }
        reset = "\033[0m"

        color = colors.get(record.levelname, reset)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        message = f"{color}[{timestamp}] {record.levelname:<8}{reset} {record.name}: {record.getMessage()}"

        context_parts = [
            f"{field}={getattr(record, field)}"
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        ]
        if context_parts:
            message += f" [{', '.join(context_parts)}]"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def setup_logging():
    """
    Configures application-wide logging with appropriate formatters.
    Uses JSON format in production, human-readable in development.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)

    if settings.is_production:
        formatter = StructuredFormatter()
    else:
        formatter = DevelopmentFormatter()

    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Set third-party loggers to WARNING to reduce noise
    for noisy in ("httpx", "httpcore", "motor", "pymongo", "openai", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger("sms_inspector")
    logger.info(
        "Logging configured",
        extra={"action": "setup_logging"}
    )

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger under the sms_inspector namespace
    """
    if name.startswith("sms_inspector"):
        return logging.getLogger(name)
    return logging.getLogger(f"sms_inspector.{name}")


class ContextFilter(logging.Filter):
    """
    Copies the active LogContext onto each record.
    Attributes already on the record (passed through `extra`) win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class LogContext:
    """
    Context manager for adding structured context to logs.

    Usage:
        with LogContext(user_id="64f...", action="fetch_sms"):
            logger.info("Fetching MDR rows")

    The context lives in a ContextVar, so it follows the current request's
    task across awaits and never leaks into concurrent requests. Nested
    contexts add to the enclosing one.
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._token: Optional[Token] = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
