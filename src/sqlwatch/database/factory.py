"""Explorer factory: DSN in, ready-to-use explorer out.

Classifies the DSN, normalizes it for its dialect, obtains a pooled
handle and wraps it in the explorer class registered for the dialect.
"""

from typing import Dict, Optional, Tuple, Type

from ..core.exceptions import ConnectError, DSNParseError, ErrorCodes
from ..core.utils import ValidationUtils
from ..logging import get_logger
from .classifier import (
    classify,
    normalize_postgres_dsn,
    parse_mysql_dsn,
    postgres_database_name,
    strip_scheme,
)
from .explorers import BaseExplorer, MySQLExplorer, PostgresExplorer, SQLITE_SCHEMA, SQLiteExplorer
from .models import ConnectionTarget, Dialect
from .pool import ConnectionPool

_EXPLORERS: Dict[Dialect, Type[BaseExplorer]] = {
    Dialect.MYSQL: MySQLExplorer,
    Dialect.POSTGRES: PostgresExplorer,
    Dialect.SQLITE: SQLiteExplorer,
}


def register_explorer(dialect: Dialect, explorer_class: Type[BaseExplorer]) -> None:
    """Set the default explorer class for ``dialect`` in new factories."""
    _EXPLORERS[Dialect(dialect)] = explorer_class


class ExplorerFactory:
    """Creates explorers on top of a shared connection pool.

    Example:
        >>> factory = ExplorerFactory(pool)
        >>> explorer = await factory.create("shop", "root:pw@tcp(localhost:3306)/shop")
        >>> [table.name for table in await explorer.get_tables()]
        ['customers', 'orders']
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self.pool = pool
        self.logger = get_logger("sqlwatch.database.factory")
        self._explorers: Dict[Dialect, Type[BaseExplorer]] = dict(_EXPLORERS)

    def register_explorer(self, dialect: Dialect, explorer_class: Type[BaseExplorer]) -> None:
        """Use ``explorer_class`` for ``dialect`` in this factory only."""
        self._explorers[Dialect(dialect)] = explorer_class

    def explorer_class(self, dialect: Dialect) -> Type[BaseExplorer]:
        return self._explorers[dialect]

    @staticmethod
    def resolve(dialect: Dialect, dsn: str) -> Tuple[str, str]:
        """Return the driver DSN and the schema name for ``dsn``.

        Raises:
            DSNParseError: If a MySQL DSN cannot be parsed
        """
        if dialect is Dialect.POSTGRES:
            normalized = normalize_postgres_dsn(dsn)
            return normalized, postgres_database_name(normalized)
        if dialect is Dialect.MYSQL:
            stripped = strip_scheme(dsn)
            try:
                params = parse_mysql_dsn(stripped)
            except DSNParseError as e:
                raise DSNParseError(
                    f"validate mysql dsn: {e.message}",
                    code=e.code,
                    context=e.context,
                    cause=e,
                ) from e
            return stripped, params.database
        return dsn, SQLITE_SCHEMA

    async def create(self, name: str, dsn: str, *, timeout: Optional[float] = None) -> BaseExplorer:
        """Create an explorer for ``dsn`` recorded under ``name``.

        Args:
            name: Display name persisted in the registry
            dsn: Connection string; its shape selects the dialect
            timeout: Connect deadline in seconds

        Raises:
            ValidationError: If ``name`` or ``dsn`` is empty, or the DSN is malformed
            UnsupportedDialectError: If the DSN matches no dialect
            ConnectError: If the backend connection fails
            RegistryError: If the connection cannot be recorded
        """
        ValidationUtils.require_fields(name=name, dsn=dsn)
        target = ConnectionTarget(name=name, dsn=dsn, dialect=classify(dsn))
        driver_dsn, schema = self.resolve(target.dialect, target.dsn)

        self.logger.debug("Creating explorer", name=name, dialect=target.dialect.value, schema=schema)
        try:
            handle = await self.pool.get(name, target.dialect.driver, driver_dsn, timeout=timeout)
        except ConnectError as e:
            self.logger.error("Connection failed", name=name, dialect=target.dialect.value, error=e.message)
            raise ConnectError(
                f"connect to {target.dialect.value}: {e.message}",
                code=e.code or ErrorCodes.CONNECTION_REFUSED,
                context={**e.context, "dialect": target.dialect.value, "name": name},
                cause=e,
            ) from e

        explorer_class = self._explorers[target.dialect]
        return explorer_class(handle, schema, config=self.pool.config)


async def create_explorer(
    pool: ConnectionPool,
    name: str,
    dsn: str,
    *,
    timeout: Optional[float] = None,
) -> BaseExplorer:
    """Create an explorer with a one-off ``ExplorerFactory``."""
    return await ExplorerFactory(pool).create(name, dsn, timeout=timeout)
