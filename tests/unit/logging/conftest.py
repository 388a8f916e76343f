"""Logging-specific test configuration and fixtures."""

import logging
import tempfile
from pathlib import Path

import pytest
import structlog

from sqlwatch.config.models import LoggingConfig
from sqlwatch.logging.factory import LoggerFactory


@pytest.fixture
def temp_log_file():
    """Create temporary log file for testing."""
    with tempfile.NamedTemporaryFile(suffix=".log", delete=False) as temp_file:
        temp_path = Path(temp_file.name)

    yield temp_path

    # Cleanup
    temp_path.unlink(missing_ok=True)


@pytest.fixture
def sample_logging_config(temp_log_file):
    """Create sample logging configuration."""
    return LoggingConfig(
        level="INFO",
        format="json",
        file_path=temp_log_file,
        console_output=False,
        max_file_size=1048576,  # 1MB
        backup_count=3,
    )


@pytest.fixture
def logger_factory():
    """Create clean logger factory for testing."""
    factory = LoggerFactory()
    yield factory
    # Cleanup after test
    factory.shutdown()


@pytest.fixture(autouse=True)
def cleanup_global_logging():
    """Restore structlog and stdlib logging state after each test."""
    saved_config = structlog.get_config()
    yield

    from sqlwatch.logging.factory import _global_factory
    _global_factory.shutdown()
    _global_factory.config = LoggingConfig()

    structlog.configure(**saved_config)

    sqlwatch_logger = logging.getLogger("sqlwatch")
    for handler in list(sqlwatch_logger.handlers):
        sqlwatch_logger.removeHandler(handler)
        handler.close()
    sqlwatch_logger.propagate = True
    sqlwatch_logger.setLevel(logging.NOTSET)
