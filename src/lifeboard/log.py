"""structlog setup.

Console output while developing, one JSON object per line in production.
contextvars are merged first so request_id (bound by RequestIdMiddleware)
lands on every line.
"""

import logging

import structlog


def configure_logging(level: str = "info", json_output: bool = False) -> None:
    renderer = (
        [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        if json_output
        else [structlog.dev.ConsoleRenderer()]
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        cache_logger_on_first_use=False,
    )
