"""
Structured Logging Module using structlog

This module provides structured logging with:
- Invocation ID correlation across dispatch, decode and output shaping
- Stage numbering for the invocation flow (see Stage)
- JSON formatting for log aggregation
- Credential redaction for basic-auth and header values

Architectural Decision: structlog for production logging
- Context-aware logging with automatic field injection
- JSON output for log aggregation
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

from prometheus_tasks.core.config.settings import get_settings

# Context variable for the current query/push/tick invocation
invocation_id_ctx: ContextVar[str | None] = ContextVar("invocation_id", default=None)

REDACTED = "[REDACTED]"

# Event fields whose values never reach the log output
_SENSITIVE_KEYS = frozenset({"password", "authorization", "proxy-authorization"})


def add_invocation_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the invocation ID from context to every log entry."""
    invocation_id = invocation_id_ctx.get()
    if invocation_id:
        event_dict["invocation_id"] = invocation_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_credentials(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact credentials from log events.

    Top-level fields named like a credential are replaced, and so are
    matching keys inside a ``headers`` mapping (case-insensitive).
    """
    for key in list(event_dict):
        if key.lower() in _SENSITIVE_KEYS:
            event_dict[key] = REDACTED

    headers = event_dict.get("headers")
    if isinstance(headers, dict):
        event_dict["headers"] = {
            name: REDACTED if name.lower() in _SENSITIVE_KEYS else value
            for name, value in headers.items()
        }

    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Upper-case the log level."""
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_invocation_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_credentials,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage=Stage.DISPATCH)
    """
    return structlog.get_logger(name)


def set_invocation_id(invocation_id: str) -> None:
    """Set the invocation ID in context for the current query, push or tick."""
    invocation_id_ctx.set(invocation_id)


def get_invocation_id() -> str | None:
    """Get the current invocation ID from context."""
    return invocation_id_ctx.get()


def clear_invocation_id() -> None:
    """Clear the invocation ID from context."""
    invocation_id_ctx.set(None)


@contextmanager
def invocation_scope(prefix: str) -> Iterator[str]:
    """
    Bind an invocation ID for the duration of a block.

    An ID already bound by an enclosing scope (a scheduler tick running a
    query) is reused and left in place on exit.

    Usage:
        with invocation_scope("query") as invocation_id:
            ...
    """
    current = invocation_id_ctx.get()
    if current:
        yield current
        return

    invocation_id = f"{prefix}-{uuid.uuid4().hex[:12]}"
    token = invocation_id_ctx.set(invocation_id)
    try:
        yield invocation_id
    finally:
        invocation_id_ctx.reset(token)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Args:
        logger: Logger instance
        stage: Stage identifier (see Stage)
        message: Log message
        level: Log level (debug, info, warning, error, critical)
        **kwargs: Additional fields to log

    Usage:
        log_stage(logger, Stage.DECODE, "Decoded query response", total=3)
    """
    log_func = getattr(logger, level.lower())
    log_func(message, stage=str(getattr(stage, "value", stage)), **kwargs)
