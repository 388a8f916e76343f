"""
sqlwatch database layer.

Connection pooling, dialect classification and schema introspection for
MySQL (PyMySQL), PostgreSQL (asyncpg) and SQLite (aiosqlite), plus the
persisted registry of recently used connections.
"""

from .models import (
    ConnectionTarget,
    Dialect,
    PersistedConnection,
    PooledConnection,
    Table,
    TabularResult,
)
from .classifier import (
    MySQLParams,
    classify,
    normalize_postgres_dsn,
    parse_mysql_dsn,
    postgres_database_name,
    strip_scheme,
)
from .normalize import build_result, cell_to_text
from .connectors import BaseConnection, open_connection, register_connector
from .explorers import BaseExplorer, MySQLExplorer, PostgresExplorer, SQLiteExplorer
from .registry import ConnectionRegistry
from .pool import ConnectionPool
from .factory import ExplorerFactory, create_explorer, register_explorer

__all__ = [
    # Models
    "ConnectionTarget",
    "Dialect",
    "PersistedConnection",
    "PooledConnection",
    "Table",
    "TabularResult",

    # Classification
    "MySQLParams",
    "classify",
    "normalize_postgres_dsn",
    "parse_mysql_dsn",
    "postgres_database_name",
    "strip_scheme",

    # Normalization
    "build_result",
    "cell_to_text",

    # Connections
    "BaseConnection",
    "open_connection",
    "register_connector",

    # Explorers
    "BaseExplorer",
    "MySQLExplorer",
    "PostgresExplorer",
    "SQLiteExplorer",

    # Pool, registry, factory
    "ConnectionPool",
    "ConnectionRegistry",
    "ExplorerFactory",
    "create_explorer",
    "register_explorer",
]
