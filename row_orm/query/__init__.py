"""Query layer - SELECT builders and aggregate conditions."""

from __future__ import annotations

from row_orm.query.builder import ConditionBuilder, QueryBuilder
from row_orm.query.conditions import (
    COMPARISON_OPERATORS,
    SQLCondition,
    avg_of,
    count_of,
    func,
    max_of,
    min_of,
    sum_of,
)

__all__ = [
    "QueryBuilder",
    "ConditionBuilder",
    "SQLCondition",
    "COMPARISON_OPERATORS",
    "sum_of",
    "count_of",
    "avg_of",
    "min_of",
    "max_of",
    "func",
]
