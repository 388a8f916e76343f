"""Log formatters for the sqlwatch logging system.

Classes:
    JSONFormatter: One JSON object per line, for log files
    TextFormatter: Human-readable single-line output

Example:
    >>> handler.setFormatter(get_formatter("text"))
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in as ``extra``.
_STANDARD_RECORD_FIELDS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "exc_info", "exc_text",
    "stack_info", "taskName",
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_FIELDS
    }


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured log output.

    Example:
        {"message":"Connection opened","timestamp":"2024-03-01T10:30:45.123456",
         "level":"INFO","logger":"sqlwatch.database.pool","dsn":"./local.db"}
    """

    def __init__(self, *, include_location: bool = False) -> None:
        """Initialize JSON formatter.

        Args:
            include_location: Include module, function and line number
        """
        super().__init__()
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "message": record.getMessage(),
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }

        if self.include_location:
            log_data["module"] = record.module
            log_data["function"] = record.funcName
            log_data["line"] = record.lineno

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        log_data.update(_extra_fields(record))

        try:
            return json.dumps(log_data, default=str, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            return json.dumps({
                "message": record.getMessage(),
                "level": record.levelname,
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "error": f"JSON serialization failed: {e}",
            })


class TextFormatter(logging.Formatter):
    """Human-readable text formatter.

    Example:
        2024-03-01 10:30:45.123 [INFO] sqlwatch.database.pool: Connection opened (dsn=./local.db)
    """

    def __init__(self, *, include_extras: bool = True, max_line_length: Optional[int] = None) -> None:
        super().__init__()
        self.include_extras = include_extras
        self.max_line_length = max_line_length

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        parts = [
            dt.strftime("%Y-%m-%d %H:%M:%S.") + f"{dt.microsecond:06d}"[:3],
            f"[{record.levelname}]",
            f"{record.name}:",
            record.getMessage(),
        ]

        if self.include_extras:
            extras = [
                f"{key}={value}" if isinstance(value, str) else f"{key}={value!r}"
                for key, value in _extra_fields(record).items()
            ]
            if extras:
                parts.append("(" + ", ".join(extras) + ")")

        formatted = " ".join(parts)

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        if self.max_line_length and len(formatted) > self.max_line_length:
            formatted = formatted[:self.max_line_length - 3] + "..."

        return formatted


def get_formatter(format_type: str, **kwargs: Any) -> logging.Formatter:
    """Get formatter instance by type.

    Args:
        format_type: Formatter type ('json' or 'text')
        **kwargs: Additional formatter arguments

    Raises:
        ValueError: If format_type is not supported
    """
    format_type = format_type.lower()

    if format_type == "json":
        return JSONFormatter(**kwargs)
    elif format_type == "text":
        return TextFormatter(**kwargs)
    else:
        raise ValueError(f"Unsupported formatter type: {format_type}")
