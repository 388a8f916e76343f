"""PostgreSQL explorer over ``pg_catalog`` and ``information_schema``.

Table names may be schema-qualified (``public.users``); unqualified names
match the table in any user schema.
"""

from typing import List, Optional, Tuple

from ...core.utils import StringUtils
from ..models import Dialect, Table, TabularResult
from .base import BaseExplorer, Statement


def split_qualified_name(table: str) -> Tuple[Optional[str], str]:
    """Split ``schema.table`` into its parts; schema is None when unqualified."""
    schema, dot, name = table.partition(".")
    if not dot:
        return None, table
    return schema, name


class PostgresExplorer(BaseExplorer):
    dialect = Dialect.POSTGRES
    quote_char = '"'

    def quote_table(self, table: str) -> str:
        return StringUtils.quote_dotted_identifier(table, self.quote_char)

    def _tables_statement(self) -> Statement:
        query = (
            "SELECT tablename, schemaname FROM pg_catalog.pg_tables "
            "WHERE schemaname NOT IN ('pg_catalog', 'information_schema') "
            "ORDER BY schemaname, tablename"
        )
        return query, ()

    def _to_tables(self, result: TabularResult) -> List[Table]:
        return [Table(name=row[0], schema=row[1]) for row in result.rows]

    def _columns_statement(self, table: str) -> Statement:
        schema, name = split_qualified_name(table)
        query = (
            "SELECT * FROM information_schema.columns "
            "WHERE table_name = $1 AND ($2::text IS NULL OR table_schema = $2::text) "
            "ORDER BY table_schema, ordinal_position"
        )
        return query, (name, schema)

    def _indexes_statement(self, table: str) -> Statement:
        schema, name = split_qualified_name(table)
        query = (
            "SELECT * FROM pg_indexes "
            "WHERE tablename = $1 AND ($2::text IS NULL OR schemaname = $2::text) "
            "ORDER BY schemaname, indexname"
        )
        return query, (name, schema)

    def _constraints_statement(self, table: str) -> Statement:
        query = (
            "SELECT conname, pg_catalog.pg_get_constraintdef(r.oid, true) AS condef "
            "FROM pg_catalog.pg_constraint r "
            "WHERE r.conrelid = $1::text::regclass "
            "ORDER BY conname"
        )
        return query, (self.quote_table(table),)
