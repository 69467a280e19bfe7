"""Structured logging with correlation_id and secret redaction."""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

__all__ = [
    "configure_logging",
    "get_logger",
    "correlation_id_var",
    "new_correlation_id",
]

# Request-scoped correlation, set by the HTTP middleware
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Keys whose values must never reach a log sink
_REDACTED_KEYS = frozenset({"authorization", "secret", "shared_secret", "key", "signature"})
_REDACTED = "[redacted]"


def new_correlation_id() -> str:
    """Generate and set a new correlation ID for the current context."""
    cid = str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def _add_correlation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    cid = correlation_id_var.get("")
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def _redact_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask header and key material accidentally passed as log context."""
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = _REDACTED
    return event_dict


def configure_logging(*, json_output: bool = True, level: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Route modules log through ``logging.getLogger(__name__)``; the signing
    engine emits structlog events. Both end up on stdout at ``level``.

    Args:
        json_output: True for JSON (production), False for console (dev).
        level: Log level string.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_correlation_id,
        _redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    numeric_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    logging.basicConfig(
        stream=sys.stdout,
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        force=True,
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **kwargs: Any) -> structlog.BoundLogger:
    """Get a bound logger, optionally tagged with the emitting module."""
    if name:
        kwargs.setdefault("logger_name", name)
    return structlog.get_logger(**kwargs)  # type: ignore[no-any-return]
