"""MySQL explorer over ``information_schema``."""

from typing import List

from ..models import Dialect, Table, TabularResult
from .base import BaseExplorer, Statement

# Falls back to the connection's default database when the DSN named none.
_SCHEMA_FILTER = "COALESCE(NULLIF(%s, ''), DATABASE())"


class MySQLExplorer(BaseExplorer):
    dialect = Dialect.MYSQL
    quote_char = "`"

    def _tables_statement(self) -> Statement:
        query = (
            "SELECT TABLE_NAME, TABLE_SCHEMA FROM INFORMATION_SCHEMA.TABLES "
            f"WHERE TABLE_SCHEMA = {_SCHEMA_FILTER} AND TABLE_TYPE = 'BASE TABLE' "
            "ORDER BY TABLE_NAME"
        )
        return query, (self.schema,)

    def _to_tables(self, result: TabularResult) -> List[Table]:
        return [Table(name=row[0], schema=self.schema or row[1]) for row in result.rows]

    def _columns_statement(self, table: str) -> Statement:
        query = (
            "SELECT * FROM information_schema.columns "
            f"WHERE table_schema = {_SCHEMA_FILTER} AND table_name = %s "
            "ORDER BY ordinal_position"
        )
        return query, (self.schema, table)

    def _indexes_statement(self, table: str) -> Statement:
        query = (
            "SELECT * FROM INFORMATION_SCHEMA.STATISTICS "
            f"WHERE TABLE_SCHEMA = {_SCHEMA_FILTER} AND TABLE_NAME = %s "
            "ORDER BY INDEX_NAME, SEQ_IN_INDEX"
        )
        return query, (self.schema, table)

    def _constraints_statement(self, table: str) -> Statement:
        query = (
            "SELECT * FROM information_schema.table_constraints "
            f"WHERE table_schema = {_SCHEMA_FILTER} AND table_name = %s"
        )
        return query, (self.schema, table)
