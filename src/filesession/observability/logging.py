"""Structured logging configuration for the record store.

This module sets up structured logging using structlog on top of the
standard library, with JSON or console output and an operation context
that tags every event emitted while a batch operation (such as a sweep)
is running.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output logs in JSON format; otherwise use console format

    Example:
        >>> setup_logging(log_level="INFO", json_logs=True)
        >>> logger = get_logger(__name__)
        >>> logger.info("store_opened", directory="/tmp/sess")
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            structlog.processors.ExceptionPrettyPrinter(),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("record_delete_failed", record_id="abc")
    """
    return structlog.get_logger(name)


@contextmanager
def operation_context(operation: str, **context: Any) -> Iterator[None]:
    """Tag all log events inside the block with an operation name.

    Args:
        operation: Operation name (e.g. "sweep")
        **context: Extra key/value pairs bound for the duration of the block

    Example:
        >>> with operation_context("sweep", directory="/tmp/sess"):
        ...     logger.info("record_expired", record_id="abc")  # carries operation="sweep"
    """
    with structlog.contextvars.bound_contextvars(operation=operation, **context):
        yield
