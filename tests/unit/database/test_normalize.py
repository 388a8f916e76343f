"""Tests for result normalization."""

import datetime
import decimal

from structlog.testing import capture_logs

from sqlwatch.database.normalize import NULL_TEXT, build_result, cell_to_text


class _Unprintable:
    def __str__(self):
        raise RuntimeError("cannot render")


class TestCellToText:
    """Test single-cell conversion."""

    def test_null(self):
        assert cell_to_text(None) == NULL_TEXT == "NULL"

    def test_bytes_are_decoded(self):
        assert cell_to_text(b"hi") == "hi"
        assert cell_to_text(bytearray(b"caf\xc3\xa9")) == "café"
        assert cell_to_text(memoryview(b"blob")) == "blob"

    def test_invalid_utf8_is_replaced(self):
        assert cell_to_text(b"\xff\xfeok") == "\ufffd\ufffdok"

    def test_other_values_use_str(self):
        assert cell_to_text(42) == "42"
        assert cell_to_text(9.5) == "9.5"
        assert cell_to_text(decimal.Decimal("1.10")) == "1.10"
        assert cell_to_text(datetime.date(2024, 3, 1)) == "2024-03-01"
        assert cell_to_text(True) == "True"


class TestBuildResult:
    """Test result-set normalization."""

    def test_rows_and_columns(self):
        result = build_result(["id", "name", "email"], [(1, "ada", None), (2, b"bob", "b@x")])

        assert result.columns == ["id", "name", "email"]
        assert result.rows == [["1", "ada", "NULL"], ["2", "bob", "b@x"]]
        assert result.row_count == 2

    def test_every_row_matches_column_count(self):
        result = build_result(["a", "b"], [(1, 2), (3,), (4, 5, 6), (7, 8)])

        assert all(len(row) == len(result.columns) for row in result.rows)
        assert result.rows == [["1", "2"], ["7", "8"]]

    def test_bad_width_rows_are_logged_and_skipped(self):
        with capture_logs() as cap_logs:
            build_result(["a", "b"], [(1,)], query="SELECT a, b FROM t")

        assert cap_logs[0]["event"] == "Skipping row with unexpected width"
        assert cap_logs[0]["log_level"] == "warning"
        assert cap_logs[0]["row_index"] == 0
        assert cap_logs[0]["query"] == "SELECT a, b FROM t"

    def test_conversion_failures_skip_only_that_row(self):
        with capture_logs() as cap_logs:
            result = build_result(["value"], [("ok",), (_Unprintable(),), ("also ok",)])

        assert result.rows == [["ok"], ["also ok"]]
        assert cap_logs[0]["event"] == "Skipping row that failed conversion"
        assert cap_logs[0]["error_type"] == "RuntimeError"
        assert cap_logs[0]["row_index"] == 1

    def test_empty_result_keeps_columns(self):
        result = build_result(["cid", "name"], [])

        assert result.is_empty
        assert result.columns == ["cid", "name"]
        assert result.rows == []
