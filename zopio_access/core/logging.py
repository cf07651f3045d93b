"""
Structured logging setup.

Usage:
    from zopio_access.core.logging import configure_logging
    configure_logging()  # reads ACCESS_LOG_LEVEL / ACCESS_LOG_FORMAT
"""

import logging
import sys

import structlog

from zopio_access.core.config import AccessSettings, get_settings
from zopio_access.utils.context import add_request_context


def configure_logging(settings: AccessSettings | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    json: one JSON object per line (production)
    text: colored console output (development)
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_context,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
