"""Dialect strategy protocol.

The one place where engine-specific SQL differences are allowed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class DialectStrategy(Protocol):
    """SQL rendering policy for one database engine."""

    @property
    def name(self) -> str:
        """Engine identifier, e.g. 'postgresql'."""
        ...

    def quote_identifier(self, name: str) -> str:
        """Quote a table or column name."""
        ...

    def render_upsert(self, table: str, columns: Sequence[str], primary_key: str) -> str:
        """Render an insert-or-update statement binding ``:c0..:cN`` in column order."""
        ...
