"""Pytest configuration and shared fixtures.

This module provides pytest configuration and shared fixtures for all tests
in the sqlwatch test suite.
"""

import sqlite3
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock

import pytest
import structlog

# Configure test logging to suppress noise during tests. Loggers are not
# cached so that ``structlog.testing.capture_logs`` sees every event.
structlog.configure(
    processors=[structlog.testing.LogCapture()],
    wrapper_class=structlog.BoundLogger,
    logger_factory=structlog.testing.ReturnLoggerFactory(),
    cache_logger_on_first_use=False,
)


class FakeDriverError(Exception):
    """Stand-in for a driver's statement error type."""


class FakeHandle:
    """In-memory ``DatabaseHandle`` recording every statement it receives."""

    driver = "fake"
    driver_errors = (FakeDriverError,)

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.executed: List[str] = []
        self.results: List[Tuple[List[str], List[Sequence[Any]]]] = []
        self.error: Optional[BaseException] = None
        self.closed = False
        self.pings = 0

    def queue(self, columns: List[str], rows: List[Sequence[Any]]) -> None:
        self.results.append((columns, rows))

    async def fetch(self, query: str, *params: Any) -> Tuple[List[str], List[Sequence[Any]]]:
        self.calls.append((query, params))
        if self.error is not None:
            raise self.error
        if self.results:
            return self.results.pop(0)
        return [], []

    async def execute(self, query: str) -> None:
        self.executed.append(query)
        if self.error is not None:
            raise self.error

    async def ping(self) -> None:
        self.pings += 1
        if self.error is not None:
            raise self.error

    async def close(self) -> None:
        self.closed = True


class FakeStore:
    """``ConnectionStore`` keeping every recorded target in a list."""

    def __init__(self) -> None:
        self.recorded: List[Tuple[str, str]] = []
        self.error: Optional[BaseException] = None

    async def add_connection(self, name: str, dsn: str) -> None:
        if self.error is not None:
            raise self.error
        self.recorded.append((name, dsn))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def mock_logger():
    """Mock structured logger for testing."""
    logger = MagicMock()
    logger.bind.return_value = logger
    logger.info = MagicMock()
    logger.error = MagicMock()
    logger.warning = MagicMock()
    logger.debug = MagicMock()
    return logger


@pytest.fixture
def fake_handle() -> FakeHandle:
    """Scriptable database handle for explorer tests."""
    return FakeHandle()


@pytest.fixture
def fake_store() -> FakeStore:
    """Connection store that records targets in memory."""
    return FakeStore()


@pytest.fixture
def fixed_clock():
    """Clock returning increasing timestamps one minute apart."""
    state: Dict[str, datetime] = {"now": datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)}

    def clock() -> datetime:
        state["now"] += timedelta(minutes=1)
        return state["now"]

    return clock


@pytest.fixture
def sqlite_db(temp_dir: Path) -> Path:
    """Create a small SQLite shop database.

    ``customers`` has a single-column primary key; ``orders`` has a
    composite primary key, a foreign key to ``customers`` and an index.
    """
    db_path = temp_dir / "shop.db"
    connection = sqlite3.connect(db_path)
    try:
        connection.executescript(
            """
            CREATE TABLE customers (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT,
                avatar BLOB
            );
            CREATE TABLE orders (
                id INTEGER NOT NULL,
                line INTEGER NOT NULL,
                customer_id INTEGER REFERENCES customers(id) ON DELETE CASCADE,
                total REAL,
                PRIMARY KEY (id, line)
            );
            CREATE INDEX idx_orders_customer ON orders(customer_id);
            INSERT INTO customers VALUES (1, 'ada', 'ada@example.com', X'6869');
            INSERT INTO customers VALUES (2, 'bob', NULL, NULL);
            INSERT INTO orders VALUES (10, 1, 1, 9.5);
            INSERT INTO orders VALUES (10, 2, 1, 3.0);
            """
        )
        connection.commit()
    finally:
        connection.close()
    return db_path


# Pytest markers for different test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (slower, real dependencies)"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests that take > 1 second"
    )
    config.addinivalue_line(
        "markers", "database: marks tests that open a real database file"
    )


# Auto-mark tests based on their location
def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        test_path = Path(item.path).relative_to(Path(config.rootpath) / "tests")

        if test_path.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)
        elif test_path.parts[0] == "integration":
            item.add_marker(pytest.mark.integration)

        if "database" in str(test_path):
            item.add_marker(pytest.mark.database)
