"""MySQL connection handle backed by PyMySQL.

PyMySQL is a blocking driver, so every call on the connection runs in a
worker thread. A cancelled statement is stopped with ``KILL QUERY`` sent
over a second, short-lived connection, and the handle stays locked until
the worker thread has returned.
"""

import asyncio
from typing import Any, Dict, Optional, Tuple

import pymysql

from ...config.models import PoolConfig
from ...core.exceptions import ErrorCodes
from ..classifier import parse_mysql_dsn, strip_scheme
from .base import BaseConnection, FetchResult

# Server error numbers
ER_ACCESS_DENIED = 1045
ER_BAD_DB = 1049


class MySQLConnection(BaseConnection):
    """PyMySQL connection in autocommit mode.

    Accepts the driver DSN format, with or without a ``mysql://`` prefix.
    """

    driver = "mysql"
    driver_errors = (pymysql.Error,)

    def __init__(self, dsn: str, raw: Any, *, connect_kwargs: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(dsn, raw)
        self._connect_kwargs = connect_kwargs

    @classmethod
    async def connect(cls, dsn: str, *, config: PoolConfig) -> "MySQLConnection":
        kwargs = parse_mysql_dsn(strip_scheme(dsn)).connect_kwargs()
        if config.connect_timeout is not None:
            kwargs["connect_timeout"] = config.connect_timeout
        kwargs["autocommit"] = True
        raw = await asyncio.to_thread(pymysql.connect, **kwargs)
        return cls(dsn, raw, connect_kwargs=kwargs)

    @classmethod
    def connect_error_code(cls, exc: BaseException) -> str:
        errno = exc.args[0] if isinstance(exc, pymysql.Error) and exc.args else None
        if errno == ER_ACCESS_DENIED:
            return ErrorCodes.AUTH_FAILED
        if errno == ER_BAD_DB:
            return ErrorCodes.DATABASE_NOT_FOUND
        return ErrorCodes.CONNECTION_REFUSED

    def _fetch_sync(self, query: str, params: Tuple[Any, ...]) -> FetchResult:
        with self._raw.cursor() as cursor:
            # Without args the driver leaves literal % signs alone.
            cursor.execute(query, params or None)
            columns = [description[0] for description in cursor.description or ()]
            rows = cursor.fetchall()
        return columns, list(rows)

    def _execute_sync(self, query: str) -> None:
        with self._raw.cursor() as cursor:
            cursor.execute(query)

    def _kill_sync(self, thread_id: int) -> None:
        kwargs = self._connect_kwargs
        if kwargs is None:
            kwargs = parse_mysql_dsn(strip_scheme(self.dsn)).connect_kwargs()
        killer = pymysql.connect(**kwargs)
        try:
            with killer.cursor() as cursor:
                cursor.execute(f"KILL QUERY {int(thread_id):d}")
        finally:
            killer.close()

    async def _fetch(self, query: str, *params: Any) -> FetchResult:
        return await self._run_to_completion(asyncio.to_thread(self._fetch_sync, query, params))

    async def _execute(self, query: str) -> None:
        await self._run_to_completion(asyncio.to_thread(self._execute_sync, query))

    async def _ping(self) -> None:
        await self._run_to_completion(asyncio.to_thread(self._raw.ping, reconnect=False))

    async def _interrupt(self) -> None:
        await asyncio.to_thread(self._kill_sync, self._raw.thread_id())

    async def _close(self) -> None:
        await asyncio.to_thread(self._raw.close)
