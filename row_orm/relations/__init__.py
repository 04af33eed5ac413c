"""Relation integrity layer - existence and dependency checks."""

from __future__ import annotations

from row_orm.relations.checks import RelationCheck, RelationReport
from row_orm.relations.manager import RelationIntegrityManager

__all__ = [
    "RelationCheck",
    "RelationReport",
    "RelationIntegrityManager",
]
