"""Driver connection handles for the supported backends.

The table maps the driver names used by the pool to handle classes:

    mysql   -> MySQLConnection (PyMySQL)
    postgres -> PostgresConnection (asyncpg)
    sqlite3 -> SQLiteConnection (aiosqlite)
"""

from .base import (
    BaseConnection,
    FetchResult,
    available_drivers,
    get_connector_class,
    open_connection,
    register_connector,
)
from .mysql import MySQLConnection
from .postgresql import PostgresConnection
from .sqlite import SQLiteConnection

register_connector(MySQLConnection.driver, MySQLConnection)
register_connector(PostgresConnection.driver, PostgresConnection)
register_connector(SQLiteConnection.driver, SQLiteConnection)

__all__ = [
    "BaseConnection",
    "FetchResult",
    "MySQLConnection",
    "PostgresConnection",
    "SQLiteConnection",
    "available_drivers",
    "get_connector_class",
    "open_connection",
    "register_connector",
]
