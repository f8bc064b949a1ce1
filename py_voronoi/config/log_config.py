"""Structured logging setup."""

import logging
import sys
from typing import Optional

import structlog

from .config import settings


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        level: Logging level name, defaults to the configured log_level
        log_format: "json" for one JSON object per line, anything else for console output
    """
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger("py_voronoi").setLevel(level)

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            renderer
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
