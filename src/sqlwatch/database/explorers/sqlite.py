"""SQLite explorer over ``sqlite_master`` and the table PRAGMAs."""

from typing import Dict, List, Optional

from ...core.exceptions import QueryError
from ...core.utils import ValidationUtils
from ..models import Dialect, Table, TabularResult
from .base import BaseExplorer, Statement

SQLITE_SCHEMA = "main"

# Column layout of PRAGMA foreign_key_list, used when the pragma reports none.
FOREIGN_KEY_COLUMNS = ["id", "seq", "table", "from", "to", "on_update", "on_delete", "match"]


class SQLiteExplorer(BaseExplorer):
    """Explorer for a single SQLite database file.

    Constraints combine the foreign keys with the primary-key columns from
    ``PRAGMA table_info``, reshaped into the foreign-key layout.
    """

    dialect = Dialect.SQLITE
    quote_char = '"'

    def _tables_statement(self) -> Statement:
        query = (
            "SELECT name, type FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
            "ORDER BY name"
        )
        return query, ()

    def _to_tables(self, result: TabularResult) -> List[Table]:
        return [Table(name=row[0], schema=SQLITE_SCHEMA) for row in result.rows]

    def _columns_statement(self, table: str) -> Statement:
        return f"PRAGMA table_info({self.quote_table(table)})", ()

    def _indexes_statement(self, table: str) -> Statement:
        return f"PRAGMA index_list({self.quote_table(table)})", ()

    def _constraints_statement(self, table: str) -> Statement:
        return f"PRAGMA foreign_key_list({self.quote_table(table)})", ()

    async def get_constraints(self, table: str, *, timeout: Optional[float] = None) -> TabularResult:
        """Return foreign keys followed by primary-key columns of ``table``.

        If reading the primary-key half fails, the foreign keys alone are
        returned and the failure is logged.
        """
        ValidationUtils.require_fields(table=table)
        foreign_keys = await self._run_statement("get_constraints", self._constraints_statement(table), timeout)
        columns = foreign_keys.columns or list(FOREIGN_KEY_COLUMNS)

        try:
            table_info = await self._run_statement("get_constraints_pk", self._columns_statement(table), timeout)
        except QueryError as e:
            self.logger.warning(
                "Primary key lookup failed; returning foreign keys only",
                table=table,
                error=str(e),
            )
            return TabularResult(rows=foreign_keys.rows, columns=columns)

        pk_rows = [self._pk_row(table, info, columns) for info in self._primary_key_columns(table_info)]
        return TabularResult(rows=foreign_keys.rows + pk_rows, columns=columns)

    @staticmethod
    def _primary_key_columns(table_info: TabularResult) -> List[Dict[str, str]]:
        entries = [info for info in table_info.as_dicts() if info.get("pk", "0").isdigit() and int(info["pk"]) > 0]
        return sorted(entries, key=lambda info: int(info["pk"]))

    @staticmethod
    def _pk_row(table: str, info: Dict[str, str], columns: List[str]) -> List[str]:
        cells = {
            "id": "pk",
            "seq": info["pk"],
            "table": table,
            "from": info.get("name", ""),
            "to": info.get("name", ""),
            "on_update": "NONE",
            "on_delete": "NONE",
            "match": "NONE",
        }
        return [cells.get(column, "") for column in columns]
