"""sqlwatch: connection and schema-introspection engine for a terminal database browser.

Example:
    >>> from sqlwatch import SqlWatchSettings, ConnectionRegistry, ConnectionPool, ExplorerFactory
    >>> settings = SqlWatchSettings.from_env()
    >>> registry = ConnectionRegistry.from_config(settings.registry)
    >>> async with ConnectionPool(settings.pool, store=registry) as pool:
    ...     explorer = await ExplorerFactory(pool).create("local", "./local.db")
    ...     tables = await explorer.get_tables()
"""

from .core.exceptions import (
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
from .config import LoggingConfig, PoolConfig, RegistryConfig, SqlWatchSettings
from .logging import configure_from_config, configure_logging, get_logger
from .database import (
    ConnectionPool,
    ConnectionRegistry,
    Dialect,
    ExplorerFactory,
    Table,
    TabularResult,
    classify,
    create_explorer,
)

__version__ = "0.1.0"

__all__ = [
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
    "LoggingConfig",
    "PoolConfig",
    "RegistryConfig",
    "SqlWatchSettings",
    "configure_from_config",
    "configure_logging",
    "get_logger",
    "ConnectionPool",
    "ConnectionRegistry",
    "Dialect",
    "ExplorerFactory",
    "Table",
    "TabularResult",
    "classify",
    "create_explorer",
]
