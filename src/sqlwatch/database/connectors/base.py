"""Base class and driver table for live database connections.

Each backend module provides a ``BaseConnection`` subclass wrapping one
driver connection. The pool opens handles through ``open_connection``,
which looks the class up by driver name.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Awaitable, ClassVar, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from ...config.models import PoolConfig
from ...core.exceptions import ConnectError, ErrorCodes, QueryError, SqlWatchException
from ...core.utils import coalesce, describe_exception, with_timeout
from ...logging import get_logger, get_performance_logger

logger = get_logger("sqlwatch.database.connectors")
perf_logger = get_performance_logger("connectors")

FetchResult = Tuple[List[str], List[Sequence[Any]]]

T = TypeVar("T")


class BaseConnection(ABC):
    """One live driver connection.

    Statements on a handle are serialized with a per-handle lock since a
    single asyncpg or PyMySQL connection cannot run overlapping queries.

    Attributes:
        driver: Driver name this class is registered under
        driver_errors: Exception types raised by the driver for failed statements
        dsn: DSN the connection was opened with
        opened_at: When the connection was established
    """

    driver: ClassVar[str] = ""
    driver_errors: ClassVar[Tuple[Type[BaseException], ...]] = ()

    def __init__(self, dsn: str, raw: Any) -> None:
        self.dsn = dsn
        self.opened_at = datetime.now(timezone.utc)
        self._raw = raw
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    @abstractmethod
    async def connect(cls, dsn: str, *, config: PoolConfig) -> "BaseConnection":
        """Open a driver connection for ``dsn``."""

    @classmethod
    def connect_error_code(cls, exc: BaseException) -> str:
        """Map a driver connect failure to an error code."""
        return ErrorCodes.CONNECTION_REFUSED

    @property
    def raw(self) -> Any:
        """Underlying driver connection object."""
        return self._raw

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _ensure_open(self, query: str) -> None:
        if self._closed:
            raise QueryError(
                "connection is closed",
                code=ErrorCodes.QUERY_EXECUTION_FAILED,
                context={"query": query, "driver": self.driver},
            )

    async def fetch(self, query: str, *params: Any) -> FetchResult:
        """Run a row-returning statement.

        Returns:
            Column names from the result metadata and the raw driver rows
        """
        self._ensure_open(query)
        async with self._lock:
            return await self._fetch(query, *params)

    async def execute(self, query: str) -> None:
        """Run a statement, discarding any result set."""
        self._ensure_open(query)
        async with self._lock:
            await self._execute(query)

    async def ping(self) -> None:
        """Round-trip a trivial statement; raise if the connection is gone."""
        self._ensure_open("ping")
        async with self._lock:
            await self._ping()

    async def close(self) -> None:
        """Close the driver connection. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        await self._close()

    async def _run_to_completion(self, operation: Awaitable[T]) -> T:
        """Await a statement that runs outside the event loop.

        Cancelling the caller does not stop work already handed to a driver
        thread. On cancellation the statement is interrupted through
        ``_interrupt`` and awaited until it settles, so the handle lock is
        only released once the connection is idle again. The
        cancellation is then re-raised; no partial result is returned.
        """
        task = asyncio.ensure_future(operation)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            try:
                await self._interrupt()
            except Exception as e:
                logger.warning(
                    "Failed to interrupt cancelled statement",
                    driver=self.driver,
                    error=describe_exception(e),
                )
            try:
                await asyncio.shield(task)
            except Exception as e:
                logger.debug(
                    "Cancelled statement ended with error",
                    driver=self.driver,
                    error=describe_exception(e),
                )
            raise

    async def _interrupt(self) -> None:
        """Abort the statement currently running on this connection."""

    @abstractmethod
    async def _fetch(self, query: str, *params: Any) -> FetchResult:
        ...

    @abstractmethod
    async def _execute(self, query: str) -> None:
        ...

    @abstractmethod
    async def _ping(self) -> None:
        ...

    @abstractmethod
    async def _close(self) -> None:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(driver={self.driver!r}, closed={self._closed})"


_CONNECTORS: Dict[str, Type[BaseConnection]] = {}


def register_connector(driver: str, connection_class: Type[BaseConnection]) -> None:
    """Register ``connection_class`` as the handle type for ``driver``."""
    if not issubclass(connection_class, BaseConnection):
        raise TypeError(f"{connection_class.__name__} must extend BaseConnection")
    if driver in _CONNECTORS and _CONNECTORS[driver] is not connection_class:
        logger.warning(
            "Overriding existing connector registration",
            driver=driver,
            existing_class=_CONNECTORS[driver].__name__,
            new_class=connection_class.__name__,
        )
    _CONNECTORS[driver] = connection_class


def get_connector_class(driver: str) -> Type[BaseConnection]:
    """Return the handle class registered for ``driver``.

    Raises:
        ConnectError: If no class is registered for ``driver``
    """
    try:
        return _CONNECTORS[driver]
    except KeyError:
        raise ConnectError(
            f"unsupported driver {driver!r}",
            code=ErrorCodes.UNSUPPORTED_DRIVER,
            context={"driver": driver, "available_drivers": available_drivers()},
        ) from None


def available_drivers() -> List[str]:
    return sorted(_CONNECTORS)


async def open_connection(
    driver: str,
    dsn: str,
    *,
    timeout: Optional[float] = None,
    config: Optional[PoolConfig] = None,
) -> BaseConnection:
    """Open a new connection through the driver registered for ``driver``.

    Args:
        driver: Driver name (``mysql``, ``postgres``, ``sqlite3``)
        dsn: Data source name in the driver's format
        timeout: Connect deadline in seconds; None falls back to
            ``config.connect_timeout``
        config: Pool configuration

    Raises:
        ConnectError: If the driver is unknown, the deadline expires, or
            the driver rejects the connection
    """
    config = config or PoolConfig()
    connection_class = get_connector_class(driver)
    deadline = coalesce(timeout, config.connect_timeout)

    def on_timeout(exc: asyncio.TimeoutError) -> ConnectError:
        return ConnectError(
            f"connect timed out after {deadline}s",
            code=ErrorCodes.CONNECTION_TIMEOUT,
            context={"driver": driver, "timeout": deadline},
            cause=exc,
        )

    with perf_logger.measure("connect", driver=driver):
        try:
            return await with_timeout(connection_class.connect(dsn, config=config), deadline, on_timeout)
        except SqlWatchException:
            raise
        except Exception as e:
            raise ConnectError(
                str(e) or type(e).__name__,
                code=connection_class.connect_error_code(e),
                context={"driver": driver},
                cause=e,
            ) from e
