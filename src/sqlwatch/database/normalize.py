"""Normalization of driver-native result sets into ``TabularResult``.

Every cell becomes a string: byte strings are decoded as UTF-8 with
invalid sequences replaced, ``None`` renders as ``"NULL"``, anything else
goes through ``str()``. Rows that cannot be converted are logged and
skipped so one bad row never hides the rest of a table.
"""

from typing import Any, Iterable, List, Optional, Sequence

from ..logging import get_logger
from .models import TabularResult

NULL_TEXT = "NULL"

logger = get_logger("sqlwatch.database.normalize")


def cell_to_text(value: Any) -> str:
    """Render a single driver value as text."""
    if value is None:
        return NULL_TEXT
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def build_result(
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    *,
    query: Optional[str] = None,
) -> TabularResult:
    """Build a ``TabularResult`` from column names and raw rows.

    Args:
        columns: Column names from the result-set metadata
        rows: Raw driver rows
        query: Statement that produced the rows, for log context

    Returns:
        Result whose rows all have exactly ``len(columns)`` text cells
    """
    column_names = [str(column) for column in columns]
    width = len(column_names)
    converted: List[List[str]] = []

    for index, row in enumerate(rows):
        if len(row) != width:
            logger.warning(
                "Skipping row with unexpected width",
                row_index=index,
                expected=width,
                actual=len(row),
                query=query,
            )
            continue
        try:
            converted.append([cell_to_text(cell) for cell in row])
        except Exception as e:
            logger.warning(
                "Skipping row that failed conversion",
                row_index=index,
                error=str(e),
                error_type=type(e).__name__,
                query=query,
            )

    return TabularResult(rows=converted, columns=column_names)
