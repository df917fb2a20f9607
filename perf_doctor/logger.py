"""Logging configuration for perf-doctor."""

import logging
import sys

import structlog


def setup_logging(log_level: str = "WARNING") -> None:
    """Configure structlog once per process. Output goes to stderr to keep stdout for results."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer()
            if level == logging.DEBUG
            else structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)


def configure_library_defaults() -> None:
    """Keep library callers quiet until they configure logging themselves.

    structlog's own defaults print every level to stdout. Unless something has
    already called ``structlog.configure``, only warnings and errors are emitted
    and they go to stderr.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        # looks up sys.stderr on every call
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
    )
