"""SQLite dialect (SQLite 3.24+ accepts the PostgreSQL upsert syntax)."""

from __future__ import annotations

from row_orm.dialects.postgresql import PostgresqlDialect


class SqliteDialect(PostgresqlDialect):
    name = "sqlite"
