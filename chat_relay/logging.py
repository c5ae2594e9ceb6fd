"""
Structured logging configuration with Loki integration.

This module provides logging with support for:
- Contextual fields (client_id of the connection being served)
- Human-readable or JSON console output
- JSON error log file
- Loki integration for centralized log aggregation
"""

import json
import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from chat_relay.settings import app_settings

# Loki rejects single entries larger than this
LOKI_MAX_LOG_SIZE_BYTES = 256 * 1024

# Context variable for storing connection-specific logging context
log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "client_id",
    }
)


def set_log_context(**kwargs: Any) -> None:
    """
    Set contextual fields for structured logging.

    Fields are added to every log message emitted in the current context.
    The stored dict is replaced, never mutated, so tasks spawned earlier
    keep their own copy.

    Args:
        **kwargs: Key-value pairs to add to log context.

    Example:
        >>> set_log_context(client_id="client-1")
        >>> logger.info("Frame received")  # Will include client_id
    """
    log_context.set({**log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    """
    Get current log context.

    Returns:
        Dictionary of contextual log fields.
    """
    return log_context.get()


def clear_log_context() -> None:
    """Clear the log context."""
    log_context.set({})


class StructuredJSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    This formatter outputs logs in JSON format with:
    - Standard fields: timestamp, level, logger, message
    - Additional contextual fields from log_context
    - Exception information when present
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string with structured log data.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENV.value,
        }

        log_data.update(get_log_context())

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = value

        json_str = json.dumps(log_data, default=str)
        if len(json_str) > LOKI_MAX_LOG_SIZE_BYTES:
            log_data["message"] = (
                log_data["message"][: LOKI_MAX_LOG_SIZE_BYTES - 1000]
                + "... [TRUNCATED]"
            )
            json_str = json.dumps(log_data, default=str)

        return json_str


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter for console output (non-JSON).

    Uses different format strings based on log level for better readability
    during development.
    """

    INFO_FMT = "%(asctime)s - [%(client_id)s] %(levelname)s: %(message)s"
    ERROR_FMT = "%(asctime)s - [%(client_id)s] %(levelname)s: %(module)s.%(funcName)s:%(lineno)d - %(message)s"

    def __init__(self, *args: Any, **kwargs: Any):
        """Initialize the formatter."""
        super().__init__(*args, **kwargs)
        self._formatters = {
            logging.INFO: logging.Formatter(
                self.INFO_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.WARNING: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.ERROR: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.DEBUG: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
        }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record with the client ID of the current connection.

        Args:
            record: The log record to format.

        Returns:
            Formatted log string.
        """
        record.client_id = get_log_context().get("client_id", "-")

        formatter = self._formatters.get(
            record.levelno, self._formatters[logging.INFO]
        )
        return formatter.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure logging for the relay.

    This function sets up:
    - Console handler (human-readable or JSON, per LOG_CONSOLE_FORMAT)
    - File handler for errors (JSON format)
    - Loki handler for centralized logging (if enabled)
    - Access log filter hiding /metrics and /health requests

    Returns:
        Configured logger instance.
    """
    settings = app_settings.logging

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, settings.LEVEL.upper()))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(
        StructuredJSONFormatter()
        if settings.CONSOLE_FORMAT == "json"
        else HumanReadableFormatter()
    )
    logger.addHandler(console_handler)

    try:
        Path(settings.FILE_PATH).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.FILE_PATH)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(StructuredJSONFormatter())
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not create file handler: {e}")

    if settings.LOKI_ENABLED:
        try:
            from logging_loki import LokiHandler

            loki_handler = LokiHandler(
                url=f"{settings.LOKI_URL}/loki/api/v{settings.LOKI_VERSION}/push",
                tags={
                    "application": "chat-relay",
                    "environment": app_settings.ENV.value,
                },
                version=settings.LOKI_VERSION,
            )
            loki_handler.setLevel(logging.INFO)
            loki_handler.setFormatter(StructuredJSONFormatter())
            logger.addHandler(loki_handler)
            logger.info("Loki handler configured successfully")
        except Exception as e:
            logger.warning(f"Could not configure Loki handler: {e}")

    from chat_relay.uvicorn_filters import ExcludeMetricsFilter

    logging.getLogger("uvicorn.access").addFilter(ExcludeMetricsFilter())

    # Disable logging during pytest runs
    if sys.argv[0].split("/")[-1] in ["pytest"]:
        logging.disable(logging.ERROR)

    return logger


# Create default logger instance
logger = setup_logging()
