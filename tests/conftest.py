"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from row_orm.core.connection import ConnectionConfig
from row_orm.core.engine import Engine


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def sqlite_engine(sqlite_config: ConnectionConfig) -> Iterator[Engine]:
    """Engine over a fresh in-memory database."""
    engine = Engine.from_config(sqlite_config)
    yield engine
    engine.close()


@pytest.fixture
def create_tables(sqlite_engine: Engine):
    """Helper to run DDL statements against the test database.

    Usage:
        create_tables("CREATE TABLE users (id INTEGER PRIMARY KEY, username TEXT)")
    """

    def _create(*statements: str) -> None:
        for statement in statements:
            sqlite_engine.execute(statement)

    return _create
