"""Logger factory and configuration for sqlwatch.

This module provides centralized logger creation and configuration of the
standard library handlers and the structlog processor chain.

Classes:
    LoggerFactory: Main logger factory and configuration manager

Functions:
    get_logger: Convenience function for getting loggers
    get_performance_logger: Convenience function for performance loggers
    configure_logging: Configure logging system globally

Example:
    >>> from sqlwatch.logging import get_logger, configure_logging
    >>> configure_logging(level="DEBUG", format="text", file_path="debug.log")
    >>> logger = get_logger(__name__)
    >>> logger.info("Registry loaded", entries=3)
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from .formatters import get_formatter
from .performance import PerformanceLogger
from .structured import StructuredLogger
from ..config.models import LoggingConfig

# Handlers installed by the factory carry this attribute so reconfiguration
# replaces them without touching handlers added by the host application.
_HANDLER_MARKER = "_sqlwatch_handler"


class LoggerFactory:
    """Factory for creating and configuring sqlwatch loggers.

    Attributes:
        config: Active logging configuration
        initialized: Whether handlers and structlog have been configured

    Example:
        >>> factory = LoggerFactory()
        >>> factory.configure(LoggingConfig(level="DEBUG", format="text"))
        >>> logger = factory.get_logger("sqlwatch.database.pool")
    """

    def __init__(self, config: Optional[LoggingConfig] = None) -> None:
        self.config = config or LoggingConfig()
        self.initialized = False
        self._loggers: Dict[str, StructuredLogger] = {}
        self._performance_loggers: Dict[str, PerformanceLogger] = {}

    def configure(self, config: LoggingConfig) -> None:
        """(Re)configure handlers and structlog from ``config``."""
        self.config = config
        self._configure_stdlib_logging()
        self._configure_structlog()
        for logger in self._loggers.values():
            logger.set_level(config.level)
        self.initialized = True

    def _configure_stdlib_logging(self) -> None:
        root_logger = logging.getLogger("sqlwatch")
        level = getattr(logging, self.config.level)
        root_logger.setLevel(level)

        for handler in list(root_logger.handlers):
            if getattr(handler, _HANDLER_MARKER, False):
                root_logger.removeHandler(handler)
                handler.close()

        handlers: List[logging.Handler] = []
        if self.config.console_output:
            handlers.append(logging.StreamHandler(sys.stderr))

        if self.config.file_path is not None:
            file_path = Path(self.config.file_path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    filename=str(file_path),
                    maxBytes=self.config.max_file_size,
                    backupCount=self.config.backup_count,
                    encoding="utf-8",
                )
            )

        for handler in handlers:
            setattr(handler, _HANDLER_MARKER, True)
            handler.setLevel(level)
            handler.setFormatter(get_formatter(self.config.format))
            root_logger.addHandler(handler)

        # A terminal UI owns the screen; keep sqlwatch records off the root handlers.
        root_logger.propagate = False

    def _configure_structlog(self) -> None:
        processors: List[Any] = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            # Hand the event dict to the stdlib formatters as ``extra`` fields.
            structlog.stdlib.render_to_log_kwargs,
        ]

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=False,
        )

    def get_logger(self, name: str, *, level: Optional[str] = None) -> StructuredLogger:
        """Get or create a structured logger.

        Args:
            name: Logger name (typically module name)
            level: Override the configured log level
        """
        cache_key = f"{name}_{level}"
        if cache_key not in self._loggers:
            self._loggers[cache_key] = StructuredLogger(name, level=level or self.config.level)
        return self._loggers[cache_key]

    def get_performance_logger(self, name: str, *, auto_log: bool = True) -> PerformanceLogger:
        """Get or create a performance logger."""
        cache_key = f"{name}_{auto_log}"
        if cache_key not in self._performance_loggers:
            self._performance_loggers[cache_key] = PerformanceLogger(
                name,
                auto_log=auto_log,
                logger=self.get_logger(f"sqlwatch.perf.{name}"),
            )
        return self._performance_loggers[cache_key]

    def get_logger_info(self) -> Dict[str, Any]:
        """Describe the active configuration and installed handlers."""
        return {
            "config": self.config.to_dict(),
            "initialized": self.initialized,
            "loggers": sorted(self._loggers),
            "handlers": [
                type(handler).__name__
                for handler in logging.getLogger("sqlwatch").handlers
                if getattr(handler, _HANDLER_MARKER, False)
            ],
        }

    def shutdown(self) -> None:
        """Close installed handlers and clear logger caches."""
        root_logger = logging.getLogger("sqlwatch")
        for handler in list(root_logger.handlers):
            if getattr(handler, _HANDLER_MARKER, False):
                root_logger.removeHandler(handler)
                handler.close()
        self._loggers.clear()
        self._performance_loggers.clear()
        self.initialized = False

    def __repr__(self) -> str:
        return (
            f"LoggerFactory("
            f"level={self.config.level!r}, "
            f"format={self.config.format!r}, "
            f"initialized={self.initialized})"
        )


# Global logger factory instance
_global_factory = LoggerFactory()


def configure_logging(
    *,
    level: str = "INFO",
    format: str = "json",
    file_path: Optional[Union[str, Path]] = None,
    console_output: bool = True,
    **kwargs: Any,
) -> LoggingConfig:
    """Configure sqlwatch logging globally.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json, text)
        file_path: Optional log file, rotated by size
        console_output: Enable stderr output
        **kwargs: Other LoggingConfig fields (max_file_size, backup_count)

    Returns:
        The validated configuration that was applied

    Example:
        >>> configure_logging(level="DEBUG", format="text", console_output=False,
        ...                   file_path="debug.log")
    """
    config = LoggingConfig(
        level=level,
        format=format,
        file_path=file_path,
        console_output=console_output,
        **kwargs,
    )
    _global_factory.configure(config)
    return config


def configure_from_config(config: LoggingConfig) -> None:
    """Configure sqlwatch logging from an existing LoggingConfig."""
    _global_factory.configure(config)


def get_logger(name: str, *, level: Optional[str] = None) -> StructuredLogger:
    """Get or create a structured logger using the global factory.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Pool closed", connections=2)
    """
    return _global_factory.get_logger(name, level=level)


def get_performance_logger(name: str, *, auto_log: bool = True) -> PerformanceLogger:
    """Get or create a performance logger using the global factory.

    Example:
        >>> perf_logger = get_performance_logger("explorers")
        >>> with perf_logger.measure("get_rows", table="users"):
        ...     result = await explorer.get_rows("users")
    """
    return _global_factory.get_performance_logger(name, auto_log=auto_log)


def get_factory() -> LoggerFactory:
    """Get the global logger factory instance."""
    return _global_factory


def shutdown_logging() -> None:
    """Shutdown the global logging system and clean up resources."""
    _global_factory.shutdown()
