"""Structlog configuration.

The library only asks for loggers; it never configures logging on import.
Applications (and the CLI) call ``configure_logging`` once at startup:

    from message_channel.log import configure_logging, get_logger

    configure_logging("DEBUG")
    logger = get_logger(__name__)
    logger.info("message_channeled", payload="Code: 1")
"""

from __future__ import annotations
import logging
import sys

import structlog
from structlog.stdlib import BoundLogger


def configure_logging(level: str = "WARNING", *, json: bool = False) -> None:
    """Route structlog through stdlib logging on stderr.

    Args:
        level: Stdlib level name (DEBUG, INFO, WARNING, ...).
        json: Render JSON lines instead of the human console format.
    """
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )


def get_logger(name: str | None = None) -> BoundLogger:
    """Return a structlog logger over the stdlib logger ``name``.

    Events always go through stdlib logging, so an unconfigured application
    only sees warnings and above (on stderr), never debug events on stdout.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
