"""Statement execution engine.

The Engine pairs a connection provider with the dialect for the same engine
identifier. Statements run inside a ConnectionScope, which commits when its
block exits normally and rolls back when it raises.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from row_orm.core.connection import ConnectionConfig, ConnectionManager
from row_orm.core.exceptions import StorageError
from row_orm.core.params import normalize_params
from row_orm.dialects import BaseDialect, get_dialect

logger = logging.getLogger(__name__)


def _rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    # Already dicts (psycopg dict_row, MySQL dictionary cursor)
    if isinstance(rows[0], dict):
        return [dict(row) for row in rows]

    return [dict(zip(columns, row, strict=True)) for row in rows]


class ConnectionScope:
    """Runs statements on one connection until the scope ends."""

    def __init__(self, connection: Any, adapter: Any, dialect: BaseDialect) -> None:
        self._connection = connection
        self._adapter = adapter
        self.dialect = dialect
        self._paramstyle: str = adapter.paramstyle

    def _run(self, sql: str, params: dict[str, Any] | None) -> Any:
        logger.debug("SQL: %s | params=%r", sql, params)
        try:
            return self._adapter.execute(
                self._connection, normalize_params(sql, self._paramstyle), params
            )
        except Exception as e:
            raise StorageError(sql, str(e)) from e

    def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Fetch all rows as column-name → value dicts."""
        cursor = self._run(sql, params)
        try:
            return _rows_to_dicts(cursor)
        except Exception as e:
            raise StorageError(sql, str(e)) from e

    def fetch_one(self, sql: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """Fetch the first row, or None."""
        rows = self.fetch_all(sql, params)
        return rows[0] if rows else None

    def fetch_scalar(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        """Fetch a single scalar value (first column of first row)."""
        row = self.fetch_one(sql, params)
        if row is None:
            return None
        return next(iter(row.values()))

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Execute a write statement. Returns affected row count."""
        cursor = self._run(sql, params)
        return int(cursor.rowcount)

    def commit(self) -> None:
        try:
            self._connection.commit()
        except Exception as e:
            raise StorageError("COMMIT", str(e)) from e

    def rollback(self) -> None:
        try:
            self._connection.rollback()
        except Exception as e:
            raise StorageError("ROLLBACK", str(e)) from e


class Engine:
    """Executes SQL for one database engine."""

    def __init__(
        self,
        connection_manager: ConnectionManager,
        dialect: BaseDialect | None = None,
    ) -> None:
        self._connection_manager = connection_manager
        self.dialect = dialect or get_dialect(connection_manager.backend)

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Engine:
        """Create an Engine from a ConnectionConfig.

        Raises:
            UnsupportedDialectError: If ``config.driver`` is not supported.
        """
        return cls(ConnectionManager(config))

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    @contextmanager
    def scope(self) -> Iterator[ConnectionScope]:
        """Open a scope; commit on normal exit, roll back on error."""
        with self._connection_manager.get_connection() as conn:
            scope = ConnectionScope(conn, self._connection_manager.adapter, self.dialect)
            try:
                yield scope
            except BaseException as exc:
                try:
                    scope.rollback()
                except StorageError:
                    # The original error is the one callers need to see.
                    logger.exception("Rollback failed after %s", type(exc).__name__)
                raise
            scope.commit()

    def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        with self.scope() as scope:
            return scope.fetch_all(sql, params)

    def fetch_one(self, sql: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        with self.scope() as scope:
            return scope.fetch_one(sql, params)

    def fetch_scalar(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        with self.scope() as scope:
            return scope.fetch_scalar(sql, params)

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        with self.scope() as scope:
            return scope.execute(sql, params)

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection_manager.close()
