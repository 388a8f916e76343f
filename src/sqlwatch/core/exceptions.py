"""sqlwatch exception hierarchy.

This module defines the exceptions raised by the connection and
introspection engine. Every exception carries an error code, a context
dictionary and an optional cause so that callers (typically the terminal
UI) can render a precise message without parsing strings.

Classes:
    SqlWatchException: Base exception for all sqlwatch operations
    ValidationError: A required input was empty or malformed
    DSNParseError: A DSN could not be parsed for its dialect
    UnsupportedDialectError: A DSN matched no known dialect
    ConnectError: A database connection could not be established
    QueryError: An introspection or execute statement failed
    QueryTimeoutError: A statement exceeded its deadline
    CloseError: One or more pooled connections failed to close
    RegistryError: The connection registry file could not be read or written

Example:
    >>> try:
    ...     explorer = await factory.create("local", "./local.db")
    ... except ConnectError as e:
    ...     logger.error("Connection failed", error_code=e.code, context=e.context)
"""

from typing import Any, Dict, Mapping, Optional


class SqlWatchException(Exception):
    """Base exception for all sqlwatch operations.

    Attributes:
        code: Unique error code for categorization
        context: Additional context information about the error
        cause: Original exception that caused this error (if any)

    Example:
        >>> raise SqlWatchException(
        ...     "Operation failed",
        ...     code="OPERATION_FAILED",
        ...     context={"dsn": "./local.db"}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        """Initialize sqlwatch exception.

        Args:
            message: Human-readable error description
            code: Unique error code for categorization (defaults to class name)
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code: str = code or self.__class__.__name__
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[BaseException] = cause

    def __str__(self) -> str:
        """Return formatted error message with code."""
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation of the exception."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"context={self.context!r}, "
            f"cause={self.cause!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }


class ValidationError(SqlWatchException):
    """Caller supplied an empty or malformed required field.

    Never retried; surfaced to the user immediately. The offending field
    name is available as ``context["field"]`` when known.
    """
    pass


class DSNParseError(ValidationError):
    """A DSN could not be parsed according to its dialect's format."""
    pass


class UnsupportedDialectError(SqlWatchException):
    """The DSN did not match any classification rule."""
    pass


class ConnectError(SqlWatchException):
    """The driver failed to establish a connection.

    Raised for bad credentials, unreachable hosts, malformed DSNs rejected
    by the driver, connect timeouts, unknown driver names and use of a
    closed pool.
    """
    pass


class QueryError(SqlWatchException):
    """An introspection or execute statement failed on a live connection.

    The failing statement is available as ``context["query"]``.
    """
    pass


class QueryTimeoutError(QueryError):
    """A statement was aborted because it exceeded its deadline."""
    pass


class CloseError(SqlWatchException):
    """Aggregated failures while shutting down pooled connections.

    Attributes:
        errors: Mapping of DSN to the exception raised while closing it
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[Mapping[str, BaseException]] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.errors: Dict[str, BaseException] = dict(errors or {})
        merged_context = {"failed": sorted(self.errors)}
        merged_context.update(context or {})
        first_cause = next(iter(self.errors.values()), None)
        super().__init__(message, code=code, context=merged_context, cause=first_cause)


class RegistryError(SqlWatchException):
    """The connection registry file could not be read or written."""
    pass


class ErrorCodes:
    """Common error codes for sqlwatch exceptions."""

    # Validation errors
    VALIDATION_FAILED = "VALIDATION_FAILED"
    DSN_PARSE_FAILED = "DSN_PARSE_FAILED"
    UNSUPPORTED_DIALECT = "UNSUPPORTED_DIALECT"

    # Connection errors
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    AUTH_FAILED = "AUTH_FAILED"
    UNSUPPORTED_DRIVER = "UNSUPPORTED_DRIVER"
    DATABASE_NOT_FOUND = "DATABASE_NOT_FOUND"
    POOL_CLOSED = "POOL_CLOSED"
    CLOSE_FAILED = "CLOSE_FAILED"

    # Query errors
    QUERY_EXECUTION_FAILED = "QUERY_EXECUTION_FAILED"
    QUERY_TIMEOUT = "QUERY_TIMEOUT"
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"

    # Registry errors
    REGISTRY_READ_FAILED = "REGISTRY_READ_FAILED"
    REGISTRY_WRITE_FAILED = "REGISTRY_WRITE_FAILED"

