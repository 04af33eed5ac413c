"""Contract tests for adapter and dialect protocol compliance."""

from __future__ import annotations

import pytest

from row_orm.adapters.mysql import MysqlAdapter
from row_orm.adapters.postgresql import PostgresqlAdapter, _build_conninfo
from row_orm.adapters.protocol import SyncAdapter
from row_orm.adapters.sqlite import SqliteAdapter
from row_orm.core.connection import ConnectionConfig, _load_adapter
from row_orm.core.enums import DatabaseBackend
from row_orm.core.exceptions import ConnectionError  # noqa: A004
from row_orm.dialects import DialectStrategy, get_dialect


class TestSqliteAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        assert isinstance(SqliteAdapter(), SyncAdapter)

    def test_paramstyle(self) -> None:
        assert SqliteAdapter().paramstyle == "named"

    def test_lifecycle(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteAdapter()
        conn = adapter.connect(sqlite_config)
        cursor = adapter.execute(conn, "SELECT :val AS val", {"val": 1})
        assert cursor.fetchone()["val"] == 1
        adapter.close(conn)

    def test_connect_failure(self, tmp_path) -> None:
        config = ConnectionConfig(driver="sqlite", database=str(tmp_path / "missing" / "x.db"))
        with pytest.raises(ConnectionError, match="Cannot connect to sqlite"):
            SqliteAdapter().connect(config)


class TestPostgresqlAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        assert isinstance(PostgresqlAdapter(), SyncAdapter)

    def test_paramstyle(self) -> None:
        assert PostgresqlAdapter().paramstyle == "pyformat"

    def test_conninfo_from_fields(self) -> None:
        config = ConnectionConfig(
            driver="postgresql", host="localhost", port=5432, user="app", database="orm"
        )
        assert _build_conninfo(config) == "host=localhost port=5432 user=app dbname=orm"

    def test_conninfo_prefers_url(self) -> None:
        config = ConnectionConfig(driver="postgresql", url="postgresql://localhost/orm")
        assert _build_conninfo(config) == "postgresql://localhost/orm"


class TestMysqlAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        assert isinstance(MysqlAdapter(), SyncAdapter)

    def test_paramstyle(self) -> None:
        assert MysqlAdapter().paramstyle == "pyformat"


class TestAdapterLoading:
    @pytest.mark.parametrize(
        ("backend", "expected"),
        [
            (DatabaseBackend.SQLITE, SqliteAdapter),
            (DatabaseBackend.POSTGRESQL, PostgresqlAdapter),
            (DatabaseBackend.MYSQL, MysqlAdapter),
        ],
    )
    def test_adapter_per_backend(self, backend: DatabaseBackend, expected: type) -> None:
        assert type(_load_adapter(backend)) is expected

    @pytest.mark.parametrize("backend", list(DatabaseBackend))
    def test_every_backend_has_dialect(self, backend: DatabaseBackend) -> None:
        dialect = get_dialect(backend)
        assert isinstance(dialect, DialectStrategy)
        assert dialect.name == backend.value
