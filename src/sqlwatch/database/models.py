"""Database models for the sqlwatch engine."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.utils import ValidationUtils


class Dialect(str, Enum):
    """Supported database backends."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"

    @property
    def driver(self) -> str:
        """Driver name handed to the connection pool."""
        return _DRIVER_NAMES[self]


_DRIVER_NAMES = {
    Dialect.MYSQL: "mysql",
    Dialect.POSTGRES: "postgres",
    Dialect.SQLITE: "sqlite3",
}


@dataclass(frozen=True)
class ConnectionTarget:
    """A named DSN together with its classified dialect."""
    name: str
    dsn: str
    dialect: Dialect

    def __post_init__(self) -> None:
        ValidationUtils.require_fields(name=self.name, dsn=self.dsn)


class PersistedConnection(BaseModel):
    """Registry entry for a connection target, keyed by ``dsn``."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Display name chosen by the user")
    dsn: str = Field(..., min_length=1, description="Data source name")
    last_used_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last time the pool handed out this connection",
    )

    @field_validator("last_used_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        # Naive timestamps from hand-edited files are taken as UTC so sorting never mixes kinds.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


@dataclass
class PooledConnection:
    """A live handle owned by the connection pool."""
    dsn: str
    driver: str
    handle: Any
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Table:
    """A table as listed by an explorer.

    ``schema`` is the catalog or schema for MySQL and PostgreSQL and the
    literal ``"main"`` for SQLite.
    """
    name: str
    schema: str


@dataclass
class TabularResult:
    """Rows and column names of an introspection or browse query.

    Every row has exactly ``len(columns)`` cells, in column order.
    """
    rows: List[List[str]] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def as_dicts(self) -> List[Dict[str, str]]:
        """Return rows as column-name keyed dictionaries.

        Duplicate column names keep the right-most cell.
        """
        return [dict(zip(self.columns, row)) for row in self.rows]
