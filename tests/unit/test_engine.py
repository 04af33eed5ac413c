"""Unit tests for Engine and ConnectionScope."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from types import SimpleNamespace
from typing import Any

import pytest

from row_orm.core.connection import ConnectionConfig, ConnectionManager
from row_orm.core.engine import ConnectionScope, Engine
from row_orm.core.exceptions import StorageError
from row_orm.dialects import MysqlDialect, SqliteDialect


@pytest.fixture
def engine(sqlite_engine: Engine, create_tables) -> Engine:
    create_tables(
        "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)",
        "INSERT INTO users (id, name) VALUES (1, 'Alice')",
        "INSERT INTO users (id, name) VALUES (2, 'Bob')",
    )
    return sqlite_engine


class _FlakyConnection:
    """Connection whose commit or rollback fails like a dropped link would."""

    def __init__(self, fail_on: str) -> None:
        self.fail_on = fail_on

    def commit(self) -> None:
        if self.fail_on == "commit":
            raise RuntimeError("server closed the connection unexpectedly")

    def rollback(self) -> None:
        if self.fail_on == "rollback":
            raise RuntimeError("server closed the connection unexpectedly")


class _SingleConnectionManager:
    def __init__(self, connection: Any) -> None:
        self.adapter = SimpleNamespace(paramstyle="named")
        self._connection = connection

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        yield self._connection


def _flaky_engine(fail_on: str) -> Engine:
    manager = _SingleConnectionManager(_FlakyConnection(fail_on))
    return Engine(manager, dialect=SqliteDialect())  # type: ignore[arg-type]


class TestEngine:
    def test_dialect_follows_driver(self, sqlite_engine: Engine) -> None:
        assert isinstance(sqlite_engine.dialect, SqliteDialect)

    def test_explicit_dialect(self, sqlite_config: ConnectionConfig) -> None:
        engine = Engine(ConnectionManager(sqlite_config), MysqlDialect())
        assert isinstance(engine.dialect, MysqlDialect)

    def test_fetch_all_returns_dicts(self, engine: Engine) -> None:
        rows = engine.fetch_all("SELECT id, name FROM users ORDER BY id")
        assert rows == [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]

    def test_fetch_one_with_params(self, engine: Engine) -> None:
        row = engine.fetch_one("SELECT name FROM users WHERE id = :key", {"key": 2})
        assert row == {"name": "Bob"}

    def test_fetch_one_no_rows(self, engine: Engine) -> None:
        assert engine.fetch_one("SELECT * FROM users WHERE id = :key", {"key": 9}) is None

    def test_fetch_scalar(self, engine: Engine) -> None:
        assert engine.fetch_scalar("SELECT COUNT(*) FROM users") == 2

    def test_fetch_scalar_no_rows(self, engine: Engine) -> None:
        assert engine.fetch_scalar("SELECT id FROM users WHERE id = 99") is None

    def test_execute_returns_rowcount(self, engine: Engine) -> None:
        count = engine.execute("UPDATE users SET name = :name", {"name": "X"})
        assert count == 2

    def test_driver_error_wrapped(self, engine: Engine) -> None:
        with pytest.raises(StorageError, match="no such table: missing") as exc_info:
            engine.fetch_all("SELECT * FROM missing")
        assert exc_info.value.sql == "SELECT * FROM missing"
        assert exc_info.value.__cause__ is not None


class TestConnectionScope:
    def test_commit_on_success(self, engine: Engine) -> None:
        with engine.scope() as scope:
            scope.execute("INSERT INTO users (id, name) VALUES (3, 'Carol')")
        assert engine.fetch_scalar("SELECT COUNT(*) FROM users") == 3

    def test_rollback_on_error(self, engine: Engine) -> None:
        with pytest.raises(RuntimeError), engine.scope() as scope:
            scope.execute("INSERT INTO users (id, name) VALUES (3, 'Carol')")
            raise RuntimeError("abort")
        assert engine.fetch_scalar("SELECT COUNT(*) FROM users") == 2

    def test_rollback_on_statement_failure(self, engine: Engine) -> None:
        with pytest.raises(StorageError), engine.scope() as scope:
            scope.execute("INSERT INTO users (id, name) VALUES (3, 'Carol')")
            scope.execute("INSERT INTO users (id, name) VALUES (3, 'Duplicate')")
        assert engine.fetch_one("SELECT * FROM users WHERE id = 3") is None

    def test_scope_exposes_dialect(self, engine: Engine) -> None:
        with engine.scope() as scope:
            assert scope.dialect is engine.dialect

    def test_commit_failure_is_storage_error(self) -> None:
        with pytest.raises(StorageError, match="closed the connection") as exc_info:
            with _flaky_engine("commit").scope():
                pass
        assert exc_info.value.sql == "COMMIT"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_rollback_failure_keeps_original_error(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="row_orm.core.engine"):
            with pytest.raises(ValueError, match="abort"):
                with _flaky_engine("rollback").scope():
                    raise ValueError("abort")
        assert "Rollback failed after ValueError" in caplog.text

    def test_rollback_failure_is_storage_error(self) -> None:
        adapter = SimpleNamespace(paramstyle="named")
        scope = ConnectionScope(_FlakyConnection("rollback"), adapter, SqliteDialect())
        with pytest.raises(StorageError, match="closed the connection") as exc_info:
            scope.rollback()
        assert exc_info.value.sql == "ROLLBACK"


class TestConnectionManager:
    def test_connection_reused(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        with manager.get_connection() as first, manager.get_connection() as second:
            assert first is second
        manager.close()

    def test_reopens_after_close(self, sqlite_config: ConnectionConfig) -> None:
        with ConnectionManager(sqlite_config) as manager:
            first = manager.open()
            manager.close()
            assert manager.open() is not first
