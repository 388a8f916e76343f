"""
Connection pool keyed by DSN.

Holds at most one live handle per distinct DSN string for the lifetime of
the pool, records every handed-out target in the connection registry and
closes all handles concurrently on shutdown.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..config.models import PoolConfig
from ..core.base import AsyncComponent
from ..core.exceptions import (
    CloseError,
    ConnectError,
    ErrorCodes,
    RegistryError,
    SqlWatchException,
)
from ..core.protocols import ConnectionStore
from ..core.utils import ValidationUtils
from ..logging import get_performance_logger
from .connectors import BaseConnection, open_connection
from .models import PooledConnection

Opener = Callable[..., Awaitable[BaseConnection]]


class ConnectionPool(AsyncComponent[PoolConfig]):
    """Pool of live connections, one per DSN.

    Cached handles are returned without a health check unless
    ``PoolConfig.ping_on_get`` is set. There is no idle eviction; handles
    live until ``close()``.

    Example:
        >>> async with ConnectionPool(PoolConfig(), store=registry) as pool:
        ...     handle = await pool.get("local", "sqlite3", "./local.db")
    """

    component_name = "ConnectionPool"

    def __init__(
        self,
        config: Optional[PoolConfig] = None,
        *,
        store: Optional[ConnectionStore] = None,
        opener: Opener = open_connection,
    ) -> None:
        """Initialize connection pool.

        Args:
            config: Pool configuration (defaults apply when omitted)
            store: Registry recording each handed-out connection
            opener: Coroutine opening a connection for ``(driver, dsn)``
        """
        super().__init__(config or PoolConfig())
        self._store = store
        self._opener = opener
        self._connections: Dict[str, PooledConnection] = {}
        self._dsn_locks: Dict[str, asyncio.Lock] = {}
        self._lock = asyncio.Lock()
        self._closed = False
        self._stats = {
            "total_opened": 0,
            "total_reused": 0,
            "total_reopened": 0,
            "total_closed": 0,
        }
        self.perf_logger = get_performance_logger("pool")

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def store(self) -> Optional[ConnectionStore]:
        return self._store

    def _closed_error(self, dsn: str) -> ConnectError:
        return ConnectError(
            "connection pool is closed",
            code=ErrorCodes.POOL_CLOSED,
            context={"dsn": dsn},
        )

    async def get(self, name: str, driver: str, dsn: str, *, timeout: Optional[float] = None) -> Any:
        """Return the live handle for ``dsn``, opening it on first use.

        Args:
            name: Display name recorded in the registry
            driver: Driver name (``mysql``, ``postgres``, ``sqlite3``)
            dsn: Pool key and connection string
            timeout: Connect deadline in seconds, defaults to
                ``PoolConfig.connect_timeout``

        Raises:
            ValidationError: If ``name``, ``driver`` or ``dsn`` is empty
            ConnectError: If the connection cannot be opened or the pool is closed
            RegistryError: If recording the target fails; the handle stays pooled
        """
        ValidationUtils.require_fields(name=name, driver=driver, dsn=dsn)
        if self._closed:
            raise self._closed_error(dsn)

        async with self._lock:
            dsn_lock = self._dsn_locks.setdefault(dsn, asyncio.Lock())

        async with dsn_lock:
            pooled = self._connections.get(dsn)
            if pooled is not None and self.config.ping_on_get:
                pooled = await self._check_health(pooled)

            if pooled is None:
                pooled = await self._open(driver, dsn, timeout)
            else:
                self._stats["total_reused"] += 1
                self._logger.debug("Reusing pooled connection", dsn=dsn, driver=pooled.driver)

        await self._record(name, dsn)
        return pooled.handle

    async def _open(self, driver: str, dsn: str, timeout: Optional[float]) -> PooledConnection:
        try:
            handle = await self._opener(driver, dsn, timeout=timeout, config=self.config)
        except SqlWatchException:
            self._logger.warning("Failed to open connection", dsn=dsn, driver=driver)
            raise
        except Exception as e:
            self._logger.warning("Failed to open connection", dsn=dsn, driver=driver, error=str(e))
            raise ConnectError(
                str(e) or type(e).__name__,
                code=ErrorCodes.CONNECTION_REFUSED,
                context={"dsn": dsn, "driver": driver},
                cause=e,
            ) from e

        async with self._lock:
            if self._closed:
                await handle.close()
                raise self._closed_error(dsn)
            pooled = PooledConnection(dsn=dsn, driver=driver, handle=handle)
            self._connections[dsn] = pooled

        self._stats["total_opened"] += 1
        self._logger.info("Connection opened", dsn=dsn, driver=driver, pooled=len(self._connections))
        return pooled

    async def _check_health(self, pooled: PooledConnection) -> Optional[PooledConnection]:
        """Ping ``pooled``; on failure close and drop it so the caller reopens."""
        try:
            await pooled.handle.ping()
            return pooled
        except Exception as e:
            self._logger.warning("Pooled connection failed ping, reopening", dsn=pooled.dsn, error=str(e))

        async with self._lock:
            self._connections.pop(pooled.dsn, None)
        try:
            await pooled.handle.close()
        except Exception as e:
            self._logger.warning("Failed to close unhealthy connection", dsn=pooled.dsn, error=str(e))
        self._stats["total_reopened"] += 1
        return None

    async def _record(self, name: str, dsn: str) -> None:
        if self._store is None:
            return
        try:
            await self._store.add_connection(name, dsn)
        except RegistryError:
            raise
        except Exception as e:
            raise RegistryError(
                f"record connection {name!r}: {e}",
                code=ErrorCodes.REGISTRY_WRITE_FAILED,
                context={"dsn": dsn, "name": name},
                cause=e,
            ) from e

    async def close(self) -> None:
        """Close every pooled handle concurrently and empty the pool.

        Every handle is attempted even if others fail. Safe to call more
        than once.

        Raises:
            CloseError: Listing each DSN whose handle failed to close
        """
        async with self._lock:
            self._closed = True
            pooled = list(self._connections.values())
            self._connections.clear()
            self._dsn_locks.clear()

        if not pooled:
            return

        with self.perf_logger.measure("close", connections=len(pooled)):
            results = await asyncio.gather(
                *(entry.handle.close() for entry in pooled),
                return_exceptions=True,
            )

        errors = {
            entry.dsn: result
            for entry, result in zip(pooled, results)
            if isinstance(result, BaseException)
        }
        self._stats["total_closed"] += len(pooled) - len(errors)
        self._logger.info("Connection pool closed", closed=len(pooled) - len(errors), failed=len(errors))

        if errors:
            raise CloseError(
                f"failed to close {len(errors)} of {len(pooled)} connections",
                errors=errors,
                code=ErrorCodes.CLOSE_FAILED,
            )

    async def _async_cleanup(self) -> None:
        await self.close()

    def dsns(self) -> List[str]:
        """DSNs with a live pooled handle, in opening order."""
        return list(self._connections)

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "pooled": len(self._connections),
            "closed": self._closed,
            "drivers": sorted({entry.driver for entry in self._connections.values()}),
        }

    def __contains__(self, dsn: object) -> bool:
        return dsn in self._connections

    def __len__(self) -> int:
        return len(self._connections)
