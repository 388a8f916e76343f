"""Tests for log formatters."""

import json
import logging
import sys

import pytest

from sqlwatch.logging.formatters import JSONFormatter, TextFormatter, get_formatter


def _record(message: str = "Connection opened", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="sqlwatch.database.pool",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
        func="get",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test cases for JSONFormatter."""

    def test_basic_fields_and_extras(self):
        output = json.loads(JSONFormatter().format(_record(dsn="./local.db", pooled=2)))

        assert output["message"] == "Connection opened"
        assert output["level"] == "INFO"
        assert output["logger"] == "sqlwatch.database.pool"
        assert output["dsn"] == "./local.db"
        assert output["pooled"] == 2
        assert "timestamp" in output
        assert "module" not in output

    def test_include_location(self):
        output = json.loads(JSONFormatter(include_location=True).format(_record()))

        assert output["function"] == "get"
        assert output["line"] == 10

    def test_exception_info(self):
        try:
            raise RuntimeError("broken pipe")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        output = json.loads(JSONFormatter().format(record))

        assert output["exception"]["type"] == "RuntimeError"
        assert output["exception"]["message"] == "broken pipe"
        assert "Traceback" in output["exception"]["traceback"]

    def test_unserializable_values_are_stringified(self):
        output = json.loads(JSONFormatter().format(_record(path=object())))

        assert output["path"].startswith("<object object")


class TestTextFormatter:
    """Test cases for TextFormatter."""

    def test_format_with_extras(self):
        output = TextFormatter().format(_record(dsn="./local.db", pooled=2))

        assert "[INFO] sqlwatch.database.pool: Connection opened" in output
        assert output.endswith("(dsn=./local.db, pooled=2)")

    def test_format_without_extras(self):
        output = TextFormatter(include_extras=False).format(_record(dsn="./local.db"))

        assert output.endswith("sqlwatch.database.pool: Connection opened")

    def test_max_line_length(self):
        output = TextFormatter(max_line_length=40).format(_record("x" * 100))

        assert len(output) == 40
        assert output.endswith("...")


class TestGetFormatter:
    """Test formatter lookup."""

    def test_known_formats(self):
        assert isinstance(get_formatter("json"), JSONFormatter)
        assert isinstance(get_formatter("TEXT"), TextFormatter)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unsupported formatter type"):
            get_formatter("xml")
