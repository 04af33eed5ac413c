"""MySQL dialect."""

from __future__ import annotations

from collections.abc import Sequence

from row_orm.dialects.base import BaseDialect


class MysqlDialect(BaseDialect):
    """Back-quoted identifiers, ``ON DUPLICATE KEY UPDATE`` upserts."""

    name = "mysql"
    quote_char = "`"

    def render_upsert(self, table: str, columns: Sequence[str], primary_key: str) -> str:
        targets = [c for c in columns if c != primary_key] or [primary_key]
        updates = ", ".join(
            f"{self.quote_identifier(c)} = VALUES({self.quote_identifier(c)})" for c in targets
        )
        return f"{self.render_insert(table, columns)} ON DUPLICATE KEY UPDATE {updates}"
