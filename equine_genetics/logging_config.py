"""Structured logging configuration for equine_genetics.

Configurable via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: INFO
- LOG_FORMAT: 'text' or 'json'. Default: text

Usage:
    from equine_genetics.logging_config import configure_logging
    configure_logging()  # Call once at application startup
"""

import logging
import os
import sys
from typing import Optional

import structlog


def get_log_level() -> int:
    """Read the log level from LOG_LEVEL, falling back to INFO for unknown names."""
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def get_log_format() -> str:
    """Read the output format from LOG_FORMAT ('text' or 'json')."""
    format_name = os.environ.get("LOG_FORMAT", "text").lower()
    return format_name if format_name in ("text", "json") else "text"


def configure_logging(level: Optional[int] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog processors and renderer.

    Args:
        level: Logging level. If None, reads LOG_LEVEL.
        log_format: 'text' or 'json'. If None, reads LOG_FORMAT.
    """
    level = get_log_level() if level is None else level
    log_format = get_log_format() if log_format is None else log_format

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
