"""sqlwatch structured logging framework.

Classes:
    StructuredLogger: Main structured logging interface
    PerformanceLogger: Operation timing
    LoggerFactory: Logger creation and configuration
    JSONFormatter, TextFormatter: stdlib formatters for the installed handlers

Example:
    >>> from sqlwatch.logging import get_logger, get_performance_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Connection opened", dsn="./local.db")
    >>>
    >>> perf_logger = get_performance_logger("explorers")
    >>> with perf_logger.measure("get_tables"):
    ...     pass
"""

from .factory import (
    LoggerFactory,
    configure_from_config,
    configure_logging,
    get_factory,
    get_logger,
    get_performance_logger,
    shutdown_logging,
)
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .performance import PerformanceLogger, PerformanceMetrics, TimingContext
from .structured import LogContext, StructuredLogger

__all__ = [
    # Factory and configuration
    "LoggerFactory",
    "configure_from_config",
    "configure_logging",
    "get_factory",
    "get_logger",
    "get_performance_logger",
    "shutdown_logging",

    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",

    # Performance logging
    "PerformanceLogger",
    "PerformanceMetrics",
    "TimingContext",

    # Structured logging
    "LogContext",
    "StructuredLogger",
]
