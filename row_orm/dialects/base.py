"""Shared SQL rendering for all dialects.

Column values are always bound as ``:c0 .. :cN`` in column order, so one
parameter dict serves insert, upsert and update statements alike.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from row_orm.core.sanitizer import quote_from_tables


class BaseDialect:
    """Base dialect; subclasses set ``name``/``quote_char`` and render upserts."""

    name: str = "generic"
    quote_char: str = '"'

    def quote_identifier(self, name: str) -> str:
        q = self.quote_char
        return q + name.replace(q, q + q) + q

    def bind_values(self, values: Sequence[Any]) -> dict[str, Any]:
        """Parameter dict matching the ``:cN`` placeholders."""
        return {f"c{i}": value for i, value in enumerate(values)}

    def render_insert(self, table: str, columns: Sequence[str]) -> str:
        names = ", ".join(self.quote_identifier(c) for c in columns)
        placeholders = ", ".join(f":c{i}" for i in range(len(columns)))
        return f"INSERT INTO {self.quote_identifier(table)} ({names}) VALUES ({placeholders})"

    def render_upsert(self, table: str, columns: Sequence[str], primary_key: str) -> str:
        raise NotImplementedError

    def render_update(self, table: str, columns: Sequence[str], primary_key: str) -> str:
        assignments = ", ".join(
            f"{self.quote_identifier(c)} = :c{i}" for i, c in enumerate(columns) if c != primary_key
        )
        if not assignments:
            assignments = f"{self.quote_identifier(primary_key)} = :c{columns.index(primary_key)}"
        return (
            f"UPDATE {self.quote_identifier(table)} SET {assignments} "
            f"WHERE {self.quote_identifier(primary_key)} = :c{columns.index(primary_key)}"
        )

    def render_delete(self, table: str, primary_key: str) -> str:
        return (
            f"DELETE FROM {self.quote_identifier(table)} "
            f"WHERE {self.quote_identifier(primary_key)} = :key"
        )

    def render_select(self, table: str, key_column: str | None = None) -> str:
        sql = f"SELECT * FROM {self.quote_identifier(table)}"
        if key_column is not None:
            sql += f" WHERE {self.quote_identifier(key_column)} = :key"
        return sql

    def render_count(self, table: str, column: str) -> str:
        return (
            f"SELECT COUNT(*) FROM {self.quote_identifier(table)} "
            f"WHERE {self.quote_identifier(column)} = :key"
        )

    def quote_from_tables(self, sql: str) -> str:
        """Quote bare ``FROM <name>`` references in hand-written SQL."""
        return quote_from_tables(sql, self.quote_identifier)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
