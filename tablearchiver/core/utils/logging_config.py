"""Structured logging configuration for the Table Archiver.

Uses structlog with context variables, ISO timestamps, and either console or
JSON rendering. Log output goes to stderr so the CLI's partition listing on
stdout stays clean. Provides get_logger() for named loggers and
configure_logging() for one-time setup.
"""

import logging
import sys
from typing import Optional

import structlog

from tablearchiver.core.config import settings

_configured = False


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure structlog processors once.

    Safe to call multiple times -- only the first invocation takes effect.

    Args:
        level: Minimum level name (``"DEBUG"``, ``"INFO"``, ...); defaults
            to ``settings.log_level``.
        json_output: Render one JSON object per event instead of the
            colored console format; defaults to ``settings.log_json``.
    """
    global _configured
    if _configured:
        return

    level = level or settings.log_level
    if json_output is None:
        json_output = settings.log_json

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a bound logger with the given name.

    Ensures logging is configured (with settings defaults) before returning.
    """
    configure_logging()
    return structlog.get_logger(logger_name=name)
