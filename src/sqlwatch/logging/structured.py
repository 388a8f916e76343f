"""Structured logging implementation for sqlwatch.

This module provides structured logging with context management so that
every event emitted while opening a connection or running an introspection
query carries the same identifying fields (dsn, dialect, table).

Classes:
    StructuredLogger: Main structured logging interface
    LogContext: Task-local context storage for log correlation

Example:
    >>> logger = StructuredLogger("sqlwatch.database.pool")
    >>> with logger.context(dsn="./local.db", driver="sqlite3"):
    ...     logger.info("Connection opened")
    ...     logger.warning("Ping failed, reopening", error="database is locked")
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Generator, Optional

import structlog

from ..core.exceptions import ValidationError


class LogContext:
    """Task-local context for log correlation and metadata.

    Backed by a ``ContextVar`` so that concurrent asyncio tasks each see
    their own values.

    Example:
        >>> context = LogContext("sqlwatch")
        >>> context.set("dsn", "./local.db")
        >>> context.get_all()
        {'dsn': './local.db'}
    """

    def __init__(self, name: str) -> None:
        self._var: ContextVar[Dict[str, Any]] = ContextVar(f"sqlwatch_log_context_{name}_{id(self)}")

    def _current(self) -> Dict[str, Any]:
        return self._var.get({})

    def set(self, key: str, value: Any) -> None:
        """Set a context value."""
        updated = dict(self._current())
        updated[key] = value
        self._var.set(updated)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a context value, or ``default`` if unset."""
        return self._current().get(key, default)

    def get_all(self) -> Dict[str, Any]:
        """Return a copy of all context values."""
        return dict(self._current())

    def clear(self) -> None:
        """Clear all context values."""
        self._var.set({})

    def update(self, context: Dict[str, Any]) -> None:
        """Update context with multiple values."""
        updated = dict(self._current())
        updated.update(context)
        self._var.set(updated)


class StructuredLogger:
    """Structured logger with context management and correlation.

    Attributes:
        name: Logger name

    Example:
        >>> logger = StructuredLogger("sqlwatch.explorers.postgres")
        >>> db_logger = logger.bind(dsn="postgres://localhost/app")
        >>> db_logger.info("Listing tables")
    """

    def __init__(
        self,
        name: str,
        *,
        level: str = "INFO",
        enable_correlation: bool = False,
        bound: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize structured logger.

        Args:
            name: Logger name (typically module name)
            level: Initial log level
            enable_correlation: Whether to attach a correlation ID to events
            bound: Context permanently attached to this logger
        """
        self.name = name
        self._enable_correlation = enable_correlation
        self._bound: Dict[str, Any] = dict(bound or {})
        self._logger = structlog.get_logger(name)
        self._context = LogContext(name)

        self._stdlib_logger = logging.getLogger(name)
        self._stdlib_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    def _ensure_correlation_id(self) -> str:
        correlation_id = self._context.get("correlation_id")
        if not correlation_id:
            correlation_id = str(uuid.uuid4())
            self._context.set("correlation_id", correlation_id)
        return correlation_id

    def _prepare_event_dict(self, **kwargs: Any) -> Dict[str, Any]:
        event_dict: Dict[str, Any] = dict(self._bound)
        event_dict.update(self._context.get_all())
        if self._enable_correlation:
            event_dict["correlation_id"] = self._ensure_correlation_id()
        event_dict.update(kwargs)
        return event_dict

    @contextmanager
    def context(self, **context_data: Any) -> Generator[None, None, None]:
        """Context manager for adding temporary context data.

        Example:
            >>> with logger.context(table="users"):
            ...     logger.info("Fetching rows")
        """
        old_context = self._context.get_all()
        try:
            self._context.update(context_data)
            yield
        finally:
            self._context.clear()
            self._context.update(old_context)

    def bind(self, **context_data: Any) -> "StructuredLogger":
        """Create a new logger with ``context_data`` attached to every event.

        Example:
            >>> pool_logger = logger.bind(component="pool")
        """
        bound = dict(self._bound)
        bound.update(context_data)
        return StructuredLogger(
            self.name,
            level=self.get_level(),
            enable_correlation=self._enable_correlation,
            bound=bound,
        )

    def set_level(self, level: str) -> None:
        """Set logging level.

        Raises:
            ValidationError: If ``level`` is not a known logging level
        """
        log_level = getattr(logging, level.upper(), None)
        if not isinstance(log_level, int):
            raise ValidationError(
                f"Unknown log level: {level}",
                code="UNKNOWN_LOG_LEVEL",
                context={"field": "level"},
            )
        self._stdlib_logger.setLevel(log_level)

    def get_level(self) -> str:
        """Get current logging level name."""
        return logging.getLevelName(self._stdlib_logger.getEffectiveLevel())

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, **self._prepare_event_dict(**kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, **self._prepare_event_dict(**kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, **self._prepare_event_dict(**kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(message, **self._prepare_event_dict(**kwargs))

    def critical(self, message: str, **kwargs: Any) -> None:
        self._logger.critical(message, **self._prepare_event_dict(**kwargs))

    def exception(self, message: str, exc_info: bool = True, **kwargs: Any) -> None:
        """Log an error with the active exception's traceback."""
        self._logger.error(message, exc_info=exc_info, **self._prepare_event_dict(**kwargs))

    def get_context(self) -> Dict[str, Any]:
        """Return bound plus task-local context."""
        merged = dict(self._bound)
        merged.update(self._context.get_all())
        return merged

    def clear_context(self) -> None:
        """Clear task-local context data. Bound data is kept."""
        self._context.clear()

    def __repr__(self) -> str:
        return (
            f"StructuredLogger("
            f"name={self.name!r}, "
            f"level={self.get_level()!r}, "
            f"correlation={self._enable_correlation})"
        )
