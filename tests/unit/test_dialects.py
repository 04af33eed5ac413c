"""Unit tests for dialect strategies."""

from __future__ import annotations

import pytest

from row_orm.core.enums import DatabaseBackend
from row_orm.core.exceptions import UnsupportedDialectError
from row_orm.dialects import (
    DialectStrategy,
    MysqlDialect,
    PostgresqlDialect,
    SqliteDialect,
    get_dialect,
)

COLUMNS = ["id", "username", "email"]


class TestGetDialect:
    @pytest.mark.parametrize(
        ("identifier", "expected"),
        [
            ("postgresql", PostgresqlDialect),
            ("mysql", MysqlDialect),
            ("sqlite", SqliteDialect),
            ("PostgreSQL", PostgresqlDialect),
            (DatabaseBackend.MYSQL, MysqlDialect),
        ],
    )
    def test_selects_by_identifier(self, identifier, expected) -> None:
        assert type(get_dialect(identifier)) is expected

    @pytest.mark.parametrize("identifier", ["oracle", "", "postgres"])
    def test_unsupported_identifier(self, identifier: str) -> None:
        with pytest.raises(UnsupportedDialectError, match="Unsupported database type"):
            get_dialect(identifier)

    def test_dialects_satisfy_protocol(self) -> None:
        for dialect in (PostgresqlDialect(), MysqlDialect(), SqliteDialect()):
            assert isinstance(dialect, DialectStrategy)


class TestPostgresqlDialect:
    def test_quote_identifier(self) -> None:
        assert PostgresqlDialect().quote_identifier("Users") == '"Users"'

    def test_quote_identifier_doubles_embedded_quotes(self) -> None:
        assert PostgresqlDialect().quote_identifier('we"ird') == '"we""ird"'

    def test_render_upsert(self) -> None:
        sql = PostgresqlDialect().render_upsert("Users", COLUMNS, "id")
        assert sql == (
            'INSERT INTO "Users" ("id", "username", "email") VALUES (:c0, :c1, :c2) '
            'ON CONFLICT ("id") DO UPDATE SET "username" = EXCLUDED."username", '
            '"email" = EXCLUDED."email"'
        )

    def test_upsert_with_only_primary_key(self) -> None:
        sql = PostgresqlDialect().render_upsert("Tags", ["id"], "id")
        assert sql == 'INSERT INTO "Tags" ("id") VALUES (:c0) ON CONFLICT ("id") DO NOTHING'

    def test_render_update(self) -> None:
        sql = PostgresqlDialect().render_update("Users", COLUMNS, "id")
        assert sql == 'UPDATE "Users" SET "username" = :c1, "email" = :c2 WHERE "id" = :c0'

    def test_render_delete(self) -> None:
        assert PostgresqlDialect().render_delete("Users", "id") == (
            'DELETE FROM "Users" WHERE "id" = :key'
        )

    def test_render_select(self) -> None:
        dialect = PostgresqlDialect()
        assert dialect.render_select("Users") == 'SELECT * FROM "Users"'
        assert dialect.render_select("Users", "id") == 'SELECT * FROM "Users" WHERE "id" = :key'

    def test_render_count(self) -> None:
        assert PostgresqlDialect().render_count("Posts", "userId") == (
            'SELECT COUNT(*) FROM "Posts" WHERE "userId" = :key'
        )

    def test_bind_values_in_column_order(self) -> None:
        assert PostgresqlDialect().bind_values([1, "JohnDoe", None]) == {
            "c0": 1,
            "c1": "JohnDoe",
            "c2": None,
        }


class TestMysqlDialect:
    def test_quote_identifier(self) -> None:
        assert MysqlDialect().quote_identifier("Users") == "`Users`"
        assert MysqlDialect().quote_identifier("a`b") == "`a``b`"

    def test_render_upsert(self) -> None:
        sql = MysqlDialect().render_upsert("Users", COLUMNS, "id")
        assert sql == (
            "INSERT INTO `Users` (`id`, `username`, `email`) VALUES (:c0, :c1, :c2) "
            "ON DUPLICATE KEY UPDATE `username` = VALUES(`username`), `email` = VALUES(`email`)"
        )

    def test_upsert_with_only_primary_key(self) -> None:
        sql = MysqlDialect().render_upsert("Tags", ["id"], "id")
        assert sql.endswith("ON DUPLICATE KEY UPDATE `id` = VALUES(`id`)")

    def test_quote_from_tables(self) -> None:
        sql = MysqlDialect().quote_from_tables("SELECT * FROM users WHERE note = 'FROM x'")
        assert sql == "SELECT * FROM `users` WHERE note = 'FROM x'"

    def test_quote_from_tables_keeps_dual(self) -> None:
        assert MysqlDialect().quote_from_tables("SELECT 1 FROM DUAL") == "SELECT 1 FROM DUAL"


class TestSqliteDialect:
    def test_uses_postgres_upsert(self) -> None:
        sql = SqliteDialect().render_upsert("Users", COLUMNS, "id")
        assert 'ON CONFLICT ("id") DO UPDATE SET' in sql

    def test_name(self) -> None:
        assert SqliteDialect().name == "sqlite"
