"""MySQL adapter using mysql-connector-python."""

from __future__ import annotations

from typing import Any

from row_orm.core.connection import ConnectionConfig
from row_orm.core.exceptions import ConnectionError  # noqa: A004


class MysqlAdapter:
    """MySQL adapter returning dictionary rows."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    def connect(self, config: ConnectionConfig) -> Any:
        import mysql.connector

        try:
            return mysql.connector.connect(
                host=config.host,
                port=config.port or 3306,
                user=config.user,
                password=config.password,
                database=config.database,
                **config.extra,
            )
        except mysql.connector.Error as e:
            raise ConnectionError("mysql", str(e)) from e

    def close(self, connection: Any) -> None:
        connection.close()

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute SQL and return a buffered cursor with dictionary results."""
        cursor = connection.cursor(dictionary=True, buffered=True)
        cursor.execute(sql, params or ())
        return cursor
