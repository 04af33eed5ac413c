"""PostgreSQL dialect."""

from __future__ import annotations

from collections.abc import Sequence

from row_orm.dialects.base import BaseDialect


class PostgresqlDialect(BaseDialect):
    """Double-quoted identifiers, ``ON CONFLICT ... DO UPDATE`` upserts."""

    name = "postgresql"
    quote_char = '"'

    def render_upsert(self, table: str, columns: Sequence[str], primary_key: str) -> str:
        updates = ", ".join(
            f"{self.quote_identifier(c)} = EXCLUDED.{self.quote_identifier(c)}"
            for c in columns
            if c != primary_key
        )
        action = f"DO UPDATE SET {updates}" if updates else "DO NOTHING"
        return (
            f"{self.render_insert(table, columns)} "
            f"ON CONFLICT ({self.quote_identifier(primary_key)}) {action}"
        )
