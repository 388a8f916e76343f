"""Shared explorer behaviour.

``BaseExplorer`` runs each dialect's catalog statements on a pooled
handle, applies the query deadline, wraps driver failures and normalizes
the result. Subclasses only supply the statements.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, List, Optional, Tuple

from ...config.models import PoolConfig
from ...core.exceptions import ErrorCodes, QueryError, QueryTimeoutError, SqlWatchException
from ...core.protocols import DatabaseHandle
from ...core.utils import StringUtils, ValidationUtils, coalesce, with_timeout
from ...logging import get_logger, get_performance_logger
from ..models import Dialect, Table, TabularResult
from ..normalize import build_result

Statement = Tuple[str, Tuple[Any, ...]]


class BaseExplorer(ABC):
    """Uniform read/execute surface over one pooled connection.

    Attributes:
        dialect: Backend this explorer speaks to
        quote_char: Identifier quote character of the dialect
    """

    dialect: ClassVar[Dialect]
    quote_char: ClassVar[str] = '"'

    def __init__(
        self,
        handle: DatabaseHandle,
        schema: str,
        *,
        config: Optional[PoolConfig] = None,
    ) -> None:
        """Initialize explorer.

        Args:
            handle: Pooled connection handle
            schema: Database or schema the explorer lists tables from
            config: Pool configuration supplying the default query timeout
        """
        self._handle = handle
        self._schema = schema
        self._config = config or PoolConfig()
        self.logger = get_logger(f"sqlwatch.explorers.{self.dialect.value}").bind(schema=schema)
        self.perf_logger = get_performance_logger(f"explorers.{self.dialect.value}")

    @property
    def handle(self) -> DatabaseHandle:
        return self._handle

    @property
    def schema(self) -> str:
        return self._schema

    def quote_table(self, table: str) -> str:
        """Quote ``table`` for interpolation into a statement."""
        return StringUtils.quote_identifier(table, self.quote_char)

    def _deadline(self, timeout: Optional[float]) -> Optional[float]:
        return coalesce(timeout, self._config.query_timeout)

    def _timeout_error(
        self, query: str, deadline: Optional[float]
    ) -> Callable[[asyncio.TimeoutError], QueryTimeoutError]:
        def build(exc: asyncio.TimeoutError) -> QueryTimeoutError:
            return QueryTimeoutError(
                f"query timed out after {deadline}s",
                code=ErrorCodes.QUERY_TIMEOUT,
                context={"query": query, "dialect": self.dialect.value, "timeout": deadline},
                cause=exc,
            )
        return build

    def _query_error(self, query: str, exc: BaseException) -> QueryError:
        return QueryError(
            str(exc) or type(exc).__name__,
            code=ErrorCodes.QUERY_EXECUTION_FAILED,
            context={"query": query, "dialect": self.dialect.value},
            cause=exc,
        )

    async def _query(
        self,
        operation: str,
        query: str,
        *params: Any,
        timeout: Optional[float] = None,
    ) -> TabularResult:
        """Run ``query`` and normalize its result.

        Raises:
            QueryTimeoutError: If the deadline expires
            QueryError: If the driver rejects the statement
        """
        deadline = self._deadline(timeout)
        self.logger.debug("Running query", operation=operation, query=query)
        with self.perf_logger.measure(operation, dialect=self.dialect.value):
            try:
                columns, rows = await with_timeout(
                    self._handle.fetch(query, *params),
                    deadline,
                    self._timeout_error(query, deadline),
                )
            except SqlWatchException:
                raise
            except self._handle.driver_errors as e:
                self.logger.error("Query failed", operation=operation, query=query, error=str(e))
                raise self._query_error(query, e) from e
        return build_result(columns, rows, query=query)

    async def _run_statement(self, operation: str, statement: Statement, timeout: Optional[float]) -> TabularResult:
        query, params = statement
        return await self._query(operation, query, *params, timeout=timeout)

    async def get_tables(self, *, timeout: Optional[float] = None) -> List[Table]:
        """List the tables of the explorer's schema."""
        result = await self._run_statement("get_tables", self._tables_statement(), timeout)
        return self._to_tables(result)

    async def get_rows(self, table: str, *, timeout: Optional[float] = None) -> TabularResult:
        """Return every row of ``table``."""
        ValidationUtils.require_fields(table=table)
        query = f"SELECT * FROM {self.quote_table(table)}"
        return await self._query("get_rows", query, timeout=timeout)

    async def get_columns(self, table: str, *, timeout: Optional[float] = None) -> TabularResult:
        """Return the column catalog rows of ``table``.

        Raises:
            QueryError: With code TABLE_NOT_FOUND when the catalog has no
                columns for ``table``
        """
        ValidationUtils.require_fields(table=table)
        statement = self._columns_statement(table)
        result = await self._run_statement("get_columns", statement, timeout)
        if result.is_empty:
            raise QueryError(
                f"table {table!r} not found",
                code=ErrorCodes.TABLE_NOT_FOUND,
                context={"query": statement[0], "dialect": self.dialect.value, "table": table},
            )
        return result

    async def get_indexes(self, table: str, *, timeout: Optional[float] = None) -> TabularResult:
        """Return the index catalog rows of ``table``."""
        ValidationUtils.require_fields(table=table)
        return await self._run_statement("get_indexes", self._indexes_statement(table), timeout)

    async def get_constraints(self, table: str, *, timeout: Optional[float] = None) -> TabularResult:
        """Return the constraint catalog rows of ``table``."""
        ValidationUtils.require_fields(table=table)
        return await self._run_statement("get_constraints", self._constraints_statement(table), timeout)

    async def execute(self, statement: str, *, timeout: Optional[float] = None) -> None:
        """Run a user statement as-is in autocommit mode."""
        deadline = self._deadline(timeout)
        self.logger.info("Executing statement", query=statement)
        with self.perf_logger.measure("execute", dialect=self.dialect.value):
            try:
                await with_timeout(
                    self._handle.execute(statement),
                    deadline,
                    self._timeout_error(statement, deadline),
                )
            except SqlWatchException:
                raise
            except self._handle.driver_errors as e:
                self.logger.error("Statement failed", query=statement, error=str(e))
                raise self._query_error(statement, e) from e

    @abstractmethod
    def _tables_statement(self) -> Statement:
        ...

    @abstractmethod
    def _to_tables(self, result: TabularResult) -> List[Table]:
        ...

    @abstractmethod
    def _columns_statement(self, table: str) -> Statement:
        ...

    @abstractmethod
    def _indexes_statement(self, table: str) -> Statement:
        ...

    @abstractmethod
    def _constraints_statement(self, table: str) -> Statement:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(schema={self._schema!r})"
