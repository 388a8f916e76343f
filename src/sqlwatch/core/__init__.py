"""sqlwatch core infrastructure.

This package provides the foundational pieces shared by the engine:
the exception hierarchy, the component base classes, the protocols at
the engine's seams, and small utilities.

Modules:
    exceptions: Exception hierarchy
    base: Component base classes (import from sqlwatch.core.base)
    protocols: Explorer, ConnectionStore and DatabaseHandle contracts
    utils: Validation, quoting and timeout helpers

Example:
    >>> from sqlwatch.core import ValidationError, Explorer
    >>> from sqlwatch.core.utils import ValidationUtils
"""

from .exceptions import (
    CloseError,
    ConnectError,
    DSNParseError,
    ErrorCodes,
    QueryError,
    QueryTimeoutError,
    RegistryError,
    SqlWatchException,
    UnsupportedDialectError,
    ValidationError,
)
from .protocols import ConnectionStore, DatabaseHandle, Explorer
from .utils import StringUtils, ValidationUtils, coalesce, with_timeout

__all__ = [
    # Exceptions
    "CloseError",
    "ConnectError",
    "DSNParseError",
    "ErrorCodes",
    "QueryError",
    "QueryTimeoutError",
    "RegistryError",
    "SqlWatchException",
    "UnsupportedDialectError",
    "ValidationError",

    # Protocols
    "ConnectionStore",
    "DatabaseHandle",
    "Explorer",

    # Utilities
    "StringUtils",
    "ValidationUtils",
    "coalesce",
    "with_timeout",
]
