"""Dialect strategies - engine-specific SQL rendering."""

from __future__ import annotations

from row_orm.core.connection import resolve_backend
from row_orm.core.enums import DatabaseBackend
from row_orm.dialects.base import BaseDialect
from row_orm.dialects.mysql import MysqlDialect
from row_orm.dialects.postgresql import PostgresqlDialect
from row_orm.dialects.protocol import DialectStrategy
from row_orm.dialects.sqlite import SqliteDialect

_DIALECTS: dict[DatabaseBackend, type[BaseDialect]] = {
    DatabaseBackend.POSTGRESQL: PostgresqlDialect,
    DatabaseBackend.MYSQL: MysqlDialect,
    DatabaseBackend.SQLITE: SqliteDialect,
}


def get_dialect(identifier: str | DatabaseBackend) -> BaseDialect:
    """Return the dialect for an engine identifier.

    Raises:
        UnsupportedDialectError: If the identifier is not supported.
    """
    backend = identifier if isinstance(identifier, DatabaseBackend) else resolve_backend(identifier)
    return _DIALECTS[backend]()


__all__ = [
    "BaseDialect",
    "DialectStrategy",
    "MysqlDialect",
    "PostgresqlDialect",
    "SqliteDialect",
    "get_dialect",
]
