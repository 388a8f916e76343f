"""PostgreSQL connection handle backed by asyncpg."""

from typing import Any

import asyncpg

from ...config.models import PoolConfig
from ...core.exceptions import ErrorCodes
from .base import BaseConnection, FetchResult


class PostgresConnection(BaseConnection):
    """asyncpg connection.

    Statements are prepared first so column names are available from the
    statement attributes even when the query returns no rows.
    """

    driver = "postgres"
    driver_errors = (asyncpg.PostgresError, asyncpg.InterfaceError)

    @classmethod
    async def connect(cls, dsn: str, *, config: PoolConfig) -> "PostgresConnection":
        raw = await asyncpg.connect(dsn=dsn)
        return cls(dsn, raw)

    @classmethod
    def connect_error_code(cls, exc: BaseException) -> str:
        if isinstance(exc, asyncpg.InvalidAuthorizationSpecificationError):
            return ErrorCodes.AUTH_FAILED
        if isinstance(exc, asyncpg.InvalidCatalogNameError):
            return ErrorCodes.DATABASE_NOT_FOUND
        return ErrorCodes.CONNECTION_REFUSED

    async def _fetch(self, query: str, *params: Any) -> FetchResult:
        statement = await self._raw.prepare(query)
        columns = [attribute.name for attribute in statement.get_attributes()]
        records = await statement.fetch(*params)
        return columns, [list(record.values()) for record in records]

    async def _execute(self, query: str) -> None:
        await self._raw.execute(query)

    async def _ping(self) -> None:
        await self._raw.fetchval("SELECT 1")

    async def _close(self) -> None:
        await self._raw.close()
