"""Protocols describing the seams of the sqlwatch engine.

These protocols are the contracts between the engine and its environment:
the UI consumes ``Explorer``; the pool consumes a ``ConnectionStore`` to
persist opened targets; explorers consume a ``DatabaseHandle`` produced by
the driver layer. All are ``runtime_checkable`` so tests can substitute
simple fakes.
"""

from typing import TYPE_CHECKING, Any, List, Optional, Protocol, Sequence, Tuple, Type, runtime_checkable

if TYPE_CHECKING:
    from ..database.models import Table, TabularResult


@runtime_checkable
class ConnectionStore(Protocol):
    """Key-value store persisting named connection targets."""

    async def add_connection(self, name: str, dsn: str) -> None:
        """Record ``dsn`` under ``name`` with the current timestamp."""
        ...


@runtime_checkable
class DatabaseHandle(Protocol):
    """Live connection handle produced by the driver layer."""

    driver: str
    driver_errors: Tuple[Type[BaseException], ...]

    async def fetch(self, query: str, *params: Any) -> Tuple[List[str], List[Sequence[Any]]]:
        """Run a row-returning statement; return column names and raw rows."""
        ...

    async def execute(self, query: str) -> None:
        """Run a statement whose result set, if any, is discarded."""
        ...

    async def ping(self) -> None:
        """Round-trip a trivial statement; raise if the connection is gone."""
        ...

    async def close(self) -> None:
        """Close the underlying driver connection."""
        ...


@runtime_checkable
class Explorer(Protocol):
    """Uniform read/execute contract implemented once per dialect."""

    async def get_tables(self, *, timeout: Optional[float] = None) -> List["Table"]:
        ...

    async def get_rows(self, table: str, *, timeout: Optional[float] = None) -> "TabularResult":
        ...

    async def get_columns(self, table: str, *, timeout: Optional[float] = None) -> "TabularResult":
        ...

    async def get_indexes(self, table: str, *, timeout: Optional[float] = None) -> "TabularResult":
        ...

    async def get_constraints(self, table: str, *, timeout: Optional[float] = None) -> "TabularResult":
        ...

    async def execute(self, statement: str, *, timeout: Optional[float] = None) -> None:
        ...
