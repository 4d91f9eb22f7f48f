"""
Configures structured logging for the application using structlog.

Library code asks for loggers through :func:`get_logger`; they are structlog
bound loggers wrapping the stdlib logger of the same name, so nothing is
printed until the application installs handlers with
:func:`configure_logging`.
"""
from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, List

import structlog

if TYPE_CHECKING:
    from readerview.config.config import LoggingConfig

PACKAGE_LOGGER = "readerview"

# Processors run on every event before it is handed to stdlib logging.
_EVENT_PROCESSORS: List[Any] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structlog logger backed by ``logging.getLogger(name)``."""
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_EVENT_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def get_debug_logger() -> Any:
    """Logger printing every event to stderr, used by ``Parser(debug=True)``."""
    return structlog.wrap_logger(
        structlog.PrintLogger(sys.stderr),
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
    )


# --- Configuration ---


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """
    Sets up a handler on the package logger that renders structlog events.
    """
    log_renderer: Any
    if config.json_output:
        log_renderer = structlog.processors.JSONRenderer()
    else:
        log_renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler: logging.Handler
    if config.file:
        handler = logging.FileHandler(config.file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    # Records from plain stdlib loggers go through the same chain.
    foreign_pre_chain: List[Any] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, log_renderer],
            foreign_pre_chain=foreign_pre_chain,
        )
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package_logger.handlers):
        if not isinstance(existing, logging.NullHandler):
            package_logger.removeHandler(existing)
            existing.close()
    package_logger.addHandler(handler)
    package_logger.setLevel(config.level.upper())

    get_logger(__name__).debug("logging configured", level=config.level, output=config.file or "stderr")
    return handler
