import logging
from typing import Any

import structlog

from graphstack.config.settings import Settings, get_settings


def configure_logging(level: int | str = logging.INFO, *, json_output: bool = True) -> None:
    """Configure structlog on top of stdlib logging.

    JSON lines are the default so deploy runs can be shipped to a log store;
    ``json_output=False`` switches to the human console renderer.
    """

    renderer: Any = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s")


def configure_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from ``GRAPHSTACK_LOG_LEVEL`` / ``GRAPHSTACK_LOG_JSON``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level.upper(), json_output=settings.log_json)


def bind_context(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Bind correlation fields (stack name, trace id) for downstream logs."""

    logger = structlog.get_logger()
    return logger.bind(**kwargs)
