"""Structured logging configuration using structlog.

Library modules only ask for loggers; the CLI (or the embedding build-plan
generator) calls configure_logging once.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from src.utils import Config


def add_component(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add component name to log event."""
    event_dict.setdefault("component", "feature-resolver")
    return event_dict


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR), defaults to Config.LOG_LEVEL
        log_format: Output format ('json' or 'console'), defaults to Config.LOG_FORMAT
    """
    log_level = log_level or Config.LOG_LEVEL
    log_format = log_format or Config.LOG_FORMAT
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Logs go to stderr so resolver output on stdout stays machine-readable
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        stream=sys.stderr,
        force=True,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_component,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.set_exc_info)
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    The structlog logger always wraps the stdlib logger of the same name,
    so until configure_logging runs, output follows the stdlib root logger
    (WARNING and above, on stderr) instead of structlog's default printer.

    Args:
        name: Logger name (typically __name__)

    Returns:
        structlog logger
    """
    return structlog.wrap_logger(logging.getLogger(name))
