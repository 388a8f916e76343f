"""Tests for the explorer factory."""

from unittest.mock import AsyncMock

import pytest

from sqlwatch.config.models import PoolConfig
from sqlwatch.core.exceptions import (
    ConnectError,
    DSNParseError,
    ErrorCodes,
    UnsupportedDialectError,
    ValidationError,
)
from sqlwatch.database import factory as factory_module
from sqlwatch.database.explorers import MySQLExplorer, PostgresExplorer, SQLiteExplorer
from sqlwatch.database.factory import ExplorerFactory, create_explorer, register_explorer
from sqlwatch.database.models import Dialect
from sqlwatch.database.pool import ConnectionPool


class _AuditingSQLiteExplorer(SQLiteExplorer):
    """Custom explorer used to check registration."""


@pytest.fixture
def opener():
    return AsyncMock(side_effect=lambda driver, dsn, **kwargs: AsyncMock(name=f"handle:{dsn}"))


@pytest.fixture
def pool(fake_store, opener):
    return ConnectionPool(PoolConfig(query_timeout=5.0), store=fake_store, opener=opener)


@pytest.fixture
def factory(pool):
    return ExplorerFactory(pool)


class TestResolve:
    """Test DSN resolution per dialect."""

    def test_postgres(self):
        assert ExplorerFactory.resolve(Dialect.POSTGRES, " postgres://localhost:5432/testdb ") == (
            "postgres://localhost:5432/testdb?sslmode=disable",
            "testdb",
        )

    def test_mysql(self):
        assert ExplorerFactory.resolve(Dialect.MYSQL, "mysql://root:pw@tcp(db:3306)/shop") == (
            "root:pw@tcp(db:3306)/shop",
            "shop",
        )

    def test_sqlite(self):
        assert ExplorerFactory.resolve(Dialect.SQLITE, "./local.db") == ("./local.db", "main")

    def test_mysql_parse_error_is_prefixed(self):
        with pytest.raises(DSNParseError) as exc_info:
            ExplorerFactory.resolve(Dialect.MYSQL, "root:pw@tcp(db:3306")

        assert exc_info.value.message == (
            "validate mysql dsn: invalid DSN: network address not terminated (missing closing brace)"
        )
        assert exc_info.value.code == ErrorCodes.DSN_PARSE_FAILED
        assert isinstance(exc_info.value.cause, DSNParseError)


class TestExplorerFactory:
    """Test explorer creation."""

    @pytest.mark.asyncio
    async def test_creates_postgres_explorer(self, factory, pool, opener, fake_store):
        explorer = await factory.create("pg", "postgres://localhost:5432/testdb")

        assert isinstance(explorer, PostgresExplorer)
        assert explorer.schema == "testdb"
        opener.assert_awaited_once_with(
            "postgres",
            "postgres://localhost:5432/testdb?sslmode=disable",
            timeout=None,
            config=pool.config,
        )
        assert fake_store.recorded == [("pg", "postgres://localhost:5432/testdb?sslmode=disable")]

    @pytest.mark.asyncio
    async def test_creates_mysql_explorer(self, factory, opener):
        explorer = await factory.create("mysql", "root:pw@(0.0.0.0:3306)/testdb", timeout=2.0)

        assert isinstance(explorer, MySQLExplorer)
        assert explorer.schema == "testdb"
        opener.assert_awaited_once_with(
            "mysql", "root:pw@(0.0.0.0:3306)/testdb", timeout=2.0, config=factory.pool.config
        )

    @pytest.mark.asyncio
    async def test_explorers_share_pooled_handle(self, factory, opener):
        first = await factory.create("a", "postgres://h/app")
        second = await factory.create("b", "postgres://h/app")

        assert first.handle is second.handle
        assert opener.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name, dsn, field", [
        ("", "./local.db", "name"),
        ("local", "", "dsn"),
    ])
    async def test_validation_happens_before_io(self, factory, opener, fake_store, name, dsn, field):
        with pytest.raises(ValidationError) as exc_info:
            await factory.create(name, dsn)

        assert exc_info.value.context == {"field": field}
        opener.assert_not_awaited()
        assert fake_store.recorded == []

    @pytest.mark.asyncio
    async def test_unsupported_dialect(self, factory, opener):
        with pytest.raises(UnsupportedDialectError):
            await factory.create("mongo", "mongodb://localhost:27017/app")

        opener.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_mysql_dsn(self, factory, opener):
        with pytest.raises(DSNParseError, match="validate mysql dsn: invalid DSN"):
            await factory.create("mysql", "root:pw@tcp(db:3306")

        opener.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connect_errors_name_the_dialect(self, fake_store):
        error = ConnectError("access denied", code=ErrorCodes.AUTH_FAILED, context={"driver": "mysql"})
        pool = ConnectionPool(store=fake_store, opener=AsyncMock(side_effect=error))

        with pytest.raises(ConnectError) as exc_info:
            await ExplorerFactory(pool).create("shop", "root:pw@tcp(db:3306)/shop")

        assert exc_info.value.message == "connect to mysql: access denied"
        assert exc_info.value.code == ErrorCodes.AUTH_FAILED
        assert exc_info.value.context == {"driver": "mysql", "dialect": "mysql", "name": "shop"}
        assert exc_info.value.cause is error

    @pytest.mark.asyncio
    async def test_real_sqlite_file(self, sqlite_db, fake_store):
        async with ConnectionPool(store=fake_store) as pool:
            explorer = await create_explorer(pool, "shop", str(sqlite_db))

            assert isinstance(explorer, SQLiteExplorer)
            assert explorer.schema == "main"
            assert [table.name for table in await explorer.get_tables()] == ["customers", "orders"]

        assert fake_store.recorded == [("shop", str(sqlite_db))]


class TestExplorerRegistration:
    @pytest.mark.asyncio
    async def test_per_factory_registration(self, factory, pool):
        factory.register_explorer(Dialect.SQLITE, _AuditingSQLiteExplorer)

        explorer = await factory.create("local", "./local.db")

        assert type(explorer) is _AuditingSQLiteExplorer
        assert ExplorerFactory(pool).explorer_class(Dialect.SQLITE) is SQLiteExplorer

    def test_module_registration_affects_new_factories(self, monkeypatch, pool):
        monkeypatch.setattr(factory_module, "_EXPLORERS", dict(factory_module._EXPLORERS))

        register_explorer("sqlite", _AuditingSQLiteExplorer)

        assert ExplorerFactory(pool).explorer_class(Dialect.SQLITE) is _AuditingSQLiteExplorer
