"""
Contextual logging utilities for SAGACIOUS.

Two pieces of request-scoped state ride along on log records:

- the correlation ID of the HTTP exchange being served
- the store binding (database, collection) a repository is operating on

Both live in context variables, so concurrent exchanges and tasks never see
each other's values.
"""

import contextvars
import logging
import uuid
from datetime import datetime
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)
_store_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "store_context", default=None
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Bind a correlation ID to the current context.

    Args:
        correlation_id: ID to bind; a random UUID is generated when None

    Returns:
        The bound correlation ID
    """
    value = correlation_id or str(uuid.uuid4())
    _correlation_id.set(value)
    return value


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def set_store_context(
    database: str | None = None, collection: str | None = None, **extra: Any
) -> contextvars.Token:
    """
    Bind the active store binding (plus any extra fields) to the current context.

    Returns:
        Token that restores the previous store context when passed to
        clear_store_context()

    Usage:
        token = set_store_context(database="shop", collection="orders", operation="get")
        try:
            ...
        finally:
            clear_store_context(token)
    """
    return _store_context.set({"database": database, "collection": collection, **extra})


def clear_store_context(token: contextvars.Token | None = None) -> None:
    """Restore the context saved in ``token``, or clear it when no token is given."""
    if token is None:
        _store_context.set(None)
    else:
        _store_context.reset(token)


def get_logging_context() -> dict[str, Any]:
    """Timestamp, correlation ID and store context, merged into one dict."""
    context: dict[str, Any] = {"timestamp": datetime.now().isoformat()}

    correlation_id = _correlation_id.get()
    if correlation_id:
        context["correlation_id"] = correlation_id

    context.update(_store_context.get() or {})
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges the current logging context into ``extra``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**get_logging_context(), **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    """Contextual counterpart of ``logging.getLogger(name)``."""
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger,
    operation: str,
    level: int = logging.INFO,
    success: bool = True,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    """
    Log the outcome of an operation with structured context.

    Args:
        logger: Logger to write to
        operation: Operation name (e.g., "repository.save")
        level: Log level
        success: Whether the operation succeeded
        duration_ms: Operation duration in milliseconds, if measured
        **context: Extra fields for the record
    """
    extra = get_logging_context()
    extra.update(operation=operation, success=success)

    message = f"Operation: {operation}" if success else f"Operation failed: {operation}"
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
        message += f" (duration: {duration_ms:.2f}ms)"

    extra.update(context)
    logger.log(level, message, extra=extra)
