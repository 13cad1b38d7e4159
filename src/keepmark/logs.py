"""structlog configuration.

Learn: Every module does `logger = structlog.get_logger()` and logs
dotted event names with keyword context (`logger.info("auth.signup",
user_id=...)`). This module wires the processor chain once at startup:
contextvars first (request_id / user_id bound by middleware and the
auth guard), then level + timestamp, then a console or JSON renderer.
"""

import logging

import structlog

from keepmark.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog for the process. Safe to call more than once."""
    level = logging.DEBUG if settings.debug else logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
