"""Logging configuration and utilities."""

import logging
import sys
from typing import Optional

import structlog
from structlog.typing import Processor

from formsync.config import get_settings


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Set up stdlib logging and structlog.

    Args:
        log_level: Overrides the configured level
        log_format: Overrides the configured format ('console' or 'json')
    """
    settings = get_settings()

    level = (log_level or settings.log_level).upper()
    format_type = log_format or settings.log_format

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=getattr(logging, level))

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance backed by the stdlib logger of that name.

    Events always go through stdlib logging, so until setup_logging() is
    called the root logger's level (WARNING by default) filters them.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


__all__ = [
    "setup_logging",
    "get_logger",
]
