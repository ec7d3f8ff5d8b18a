"""Structured logging setup shared by the CLI and the API."""

import logging
import sys

import structlog

# Driver loggers that are chatty at INFO and below.
NOISY_LOGGERS = ("aiosqlite", "asyncpg", "sqlalchemy.pool")


def configure_logging(log_level: str = "INFO", environment: str = "development") -> None:
    """
    Configure structlog and the standard library root logger.

    Production renders one JSON object per line; any other environment uses
    the coloured console renderer. Import runs bind ``import_log_id`` and
    ``filename`` into the context, so every event carries them.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Deployment environment name
    """
    level = logging.getLevelName(log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer()
        if environment.lower() == "production"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
