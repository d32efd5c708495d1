"""Structured logging configuration with structlog."""

import logging

import structlog

from cityhunt.config import Settings

# Driver loggers that flood the output at INFO and below.
_DRIVER_LOGGERS = ("pymongo", "motor")


def setup_logging(settings: Settings) -> None:
    """Route structlog through stdlib logging, rendered as JSON lines or for a console.

    JSON output carries tracebacks as structured fields; the console renderer
    formats them itself. MongoDB driver logs stay at WARNING unless debug is on.
    """
    json_output = settings.log_format == "json"
    tail: list[structlog.types.Processor] = (
        [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
        if json_output
        else [structlog.dev.ConsoleRenderer()]
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *tail,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)
    for name in _DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(level if settings.debug else logging.WARNING)
