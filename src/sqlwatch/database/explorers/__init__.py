"""Dialect explorers implementing the ``Explorer`` protocol."""

from .base import BaseExplorer
from .mysql import MySQLExplorer
from .postgresql import PostgresExplorer, split_qualified_name
from .sqlite import FOREIGN_KEY_COLUMNS, SQLITE_SCHEMA, SQLiteExplorer

__all__ = [
    "BaseExplorer",
    "FOREIGN_KEY_COLUMNS",
    "MySQLExplorer",
    "PostgresExplorer",
    "SQLITE_SCHEMA",
    "SQLiteExplorer",
    "split_qualified_name",
]
