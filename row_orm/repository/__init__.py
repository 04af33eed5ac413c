"""Repository layer - metadata-driven CRUD."""

from __future__ import annotations

from row_orm.repository.base import Repository, execute_raw_query

__all__ = [
    "Repository",
    "execute_raw_query",
]
