"""SQLite connection handle backed by aiosqlite."""

import sqlite3
from pathlib import Path
from typing import Any, Tuple

import aiosqlite

from ...config.models import PoolConfig
from ...core.exceptions import ConnectError, ErrorCodes
from .base import BaseConnection, FetchResult


class SQLiteConnection(BaseConnection):
    """aiosqlite connection in autocommit mode; the DSN is a file path.

    A cancelled statement is stopped with ``sqlite3.Connection.interrupt``.
    """

    driver = "sqlite3"
    driver_errors = (sqlite3.Error,)

    @classmethod
    async def connect(cls, dsn: str, *, config: PoolConfig) -> "SQLiteConnection":
        database_path = Path(dsn)
        if not config.sqlite_create_missing and not database_path.exists():
            raise ConnectError(
                f"SQLite database file not found: {database_path}",
                code=ErrorCodes.DATABASE_NOT_FOUND,
                context={"driver": cls.driver, "database_path": str(database_path)},
            )
        raw = await aiosqlite.connect(str(database_path), isolation_level=None)
        return cls(dsn, raw)

    async def _fetch(self, query: str, *params: Any) -> FetchResult:
        return await self._run_to_completion(self._fetch_all(query, params))

    async def _fetch_all(self, query: str, params: Tuple[Any, ...]) -> FetchResult:
        async with self._raw.execute(query, params) as cursor:
            rows = await cursor.fetchall()
            columns = [description[0] for description in cursor.description or ()]
        return columns, list(rows)

    async def _execute(self, query: str) -> None:
        await self._run_to_completion(self._execute_one(query))

    async def _execute_one(self, query: str) -> None:
        # executescript would commit implicitly; a single statement keeps autocommit semantics.
        async with self._raw.execute(query):
            pass

    async def _interrupt(self) -> None:
        await self._raw.interrupt()

    async def _ping(self) -> None:
        async with self._raw.execute("SELECT 1") as cursor:
            await cursor.fetchone()

    async def _close(self) -> None:
        await self._raw.close()
