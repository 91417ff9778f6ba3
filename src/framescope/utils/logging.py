"""Structured logging configuration for framescope.

structlog renders each event and hands it to the standard library. On an
interactive terminal a RichHandler prints it; otherwise a plain stderr
stream handler writes one JSON object per line. stdout stays reserved for
results.

Until setup_logging() runs, library use logs through the standard library
at WARNING, so debug events are dropped and nothing reaches stdout.
"""

from __future__ import annotations

import logging
import sys

import structlog
from rich.console import Console
from rich.logging import RichHandler

from framescope.utils.config import DEFAULT_LOG_LEVEL

SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]

JSON_PROCESSORS: list[structlog.types.Processor] = [
    structlog.processors.dict_tracebacks,
    structlog.processors.JSONRenderer(),
]


def _configure_structlog(processors: list[structlog.types.Processor], level: int) -> None:
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_default_logging() -> None:
    """Route structlog through the standard library at WARNING.

    Installs no handlers, so the host application decides where records go.
    """
    _configure_structlog(SHARED_PROCESSORS + JSON_PROCESSORS, logging.WARNING)


def setup_logging(log_level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Standard level name (DEBUG, INFO, WARNING, ...).
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    if sys.stderr.isatty():
        # Human-readable format for interactive use
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            show_time=False,
            rich_tracebacks=True,
            tracebacks_show_locals=level == logging.DEBUG,
        )
        processors = SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer(colors=False)]
    else:
        # JSON lines when piped; no decoration around the rendered event
        handler = logging.StreamHandler(sys.stderr)
        processors = SHARED_PROCESSORS + JSON_PROCESSORS

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    _configure_structlog(processors, level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured bound logger
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log entries in this context.

    Args:
        **kwargs: Context key-value pairs to bind
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


if not structlog.is_configured():
    configure_default_logging()
