"""Unit tests for parameter normalization and binding."""

from __future__ import annotations

from row_orm.core.params import ParamBinder, normalize_params


class TestNormalizeParams:
    def test_named_passthrough(self) -> None:
        sql = 'SELECT * FROM "Users" WHERE "id" = :key'
        assert normalize_params(sql, "named") == sql

    def test_pyformat_conversion(self) -> None:
        sql = 'INSERT INTO "Users" ("id", "username") VALUES (:c0, :c1)'
        expected = 'INSERT INTO "Users" ("id", "username") VALUES (%(c0)s, %(c1)s)'
        assert normalize_params(sql, "pyformat") == expected

    def test_typecast_exclusion(self) -> None:
        sql = "SELECT value::integer FROM t WHERE id = :key"
        expected = "SELECT value::integer FROM t WHERE id = %(key)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_string_literal_exclusion(self) -> None:
        sql = "SELECT * FROM t WHERE col = ':not_a_param' AND id = :key"
        expected = "SELECT * FROM t WHERE col = ':not_a_param' AND id = %(key)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_no_params(self) -> None:
        assert normalize_params("SELECT 1", "pyformat") == "SELECT 1"


class TestParamBinder:
    def test_sequential_names(self) -> None:
        binder = ParamBinder()
        assert binder.bind("JohnDoe") == ":p0"
        assert binder.bind(1) == ":p1"
        assert binder.params == {"p0": "JohnDoe", "p1": 1}

    def test_custom_prefix(self) -> None:
        binder = ParamBinder(prefix="h")
        assert binder.bind(0) == ":h0"

    def test_same_value_bound_twice(self) -> None:
        binder = ParamBinder()
        binder.bind(5)
        binder.bind(5)
        assert len(binder.params) == 2

    def test_bound_names_survive_pyformat(self) -> None:
        binder = ParamBinder()
        sql = f"SELECT * FROM t WHERE a = {binder.bind(1)}"
        assert normalize_params(sql, "pyformat") == "SELECT * FROM t WHERE a = %(p0)s"
