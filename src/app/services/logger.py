"""Structured logging with structlog.

Lifecycle events (token minted, rotated, session invalidated, ...) are emitted
as structlog events named by `SessionEvent`, with their fields as key/value
pairs instead of interpolated text.

Request-scoped values (request_id, user_id) are bound through
`structlog.contextvars` so concurrent requests never share them.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, WrappedLogger

from src.domain.entities import SessionEvent


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service information to log entries."""
    event_dict["service"] = "session-auth"
    return event_dict


def configure_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """Configure stdlib logging and structlog for the application.

    Args:
        log_level: The minimum log level to output (DEBUG, INFO, WARNING, ERROR).
        json_format: If True, output JSON lines; otherwise human-readable output.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_service_info,
        structlog.processors.format_exc_info,
    ]

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Loggers stay uncached so structlog.testing.capture_logs sees every event
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger with the given name.

    Example:
        logger = get_logger(__name__)
        log_event(logger, SessionEvent.token_rotated, user_id=user_id)
    """
    return structlog.get_logger(name)


def log_event(
    logger: Any, event: SessionEvent, level: str = "info", **fields: Any
) -> None:
    """Emit a lifecycle event with structured fields."""
    getattr(logger, level)(event.value, **fields)


def bind_request_context(
    request_id: Optional[str] = None, user_id: Optional[str] = None
) -> None:
    """Bind values included in every event until `clear_request_context()`."""
    values = {"request_id": request_id, "user_id": user_id}
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in values.items() if value is not None}
    )


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
