"""SQLite adapter using the stdlib sqlite3 module."""

from __future__ import annotations

import sqlite3
from typing import Any

from row_orm.core.connection import ConnectionConfig
from row_orm.core.exceptions import ConnectionError  # noqa: A004


class SqliteAdapter:
    """SQLite adapter; ``config.database`` is a file path or ``:memory:``."""

    @property
    def paramstyle(self) -> str:
        return "named"

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(config.database or ":memory:")
        except sqlite3.Error as e:
            raise ConnectionError("sqlite", str(e)) from e
        conn.row_factory = sqlite3.Row
        return conn

    def close(self, connection: sqlite3.Connection) -> None:
        connection.close()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        return connection.execute(sql, params or {})
