"""Aggregate conditions for HAVING clauses."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from row_orm.core.enums import AggregateFunction
from row_orm.core.exceptions import QueryBuildError

COMPARISON_OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">="})

_FUNCTION_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_UNSET: Any = object()


@dataclass(frozen=True)
class SQLCondition:
    """``FUNC(col[, col...]) [op value]``.

    ``function`` is an AggregateFunction or, for N-ary functions such as
    ``CONCAT``, a bare function name. The comparison value is always bound as
    a parameter when the condition is rendered.

    Example::

        SQLCondition(AggregateFunction.SUM, ("id",)).with_operator(">", 0)
    """

    function: AggregateFunction | str
    columns: tuple[str, ...]
    operator: str | None = None
    value: Any = _UNSET

    def __post_init__(self) -> None:
        if isinstance(self.columns, str):
            object.__setattr__(self, "columns", (self.columns,))
        else:
            object.__setattr__(self, "columns", tuple(self.columns))
        if not self.columns:
            raise QueryBuildError(f"{self.function_name}() needs at least one column")
        if not _FUNCTION_NAME.match(self.function_name):
            raise QueryBuildError(f"Invalid SQL function name: {self.function_name!r}")
        if self.operator is not None and self.operator not in COMPARISON_OPERATORS:
            raise QueryBuildError(f"Unsupported comparison operator: {self.operator!r}")
        if (self.operator is None) != (self.value is _UNSET):
            raise QueryBuildError("A comparison needs both an operator and a value")

    @property
    def function_name(self) -> str:
        if isinstance(self.function, AggregateFunction):
            return self.function.value
        return self.function.upper()

    @property
    def has_comparison(self) -> bool:
        return self.operator is not None

    def with_operator(self, operator: str, value: Any) -> SQLCondition:
        """Return a copy comparing the function result against ``value``."""
        return replace(self, operator=operator, value=value)

    def render(self, quote: Callable[[str], str], bind: Callable[[Any], str]) -> str:
        """Render with quoted column names and the value bound through ``bind``."""
        sql = f"{self.function_name}({', '.join(quote(c) for c in self.columns)})"
        if self.operator is not None:
            sql += f" {self.operator} {bind(self.value)}"
        return sql


def _aggregate(function: AggregateFunction) -> Callable[..., SQLCondition]:
    def build(*columns: str) -> SQLCondition:
        return SQLCondition(function, columns)

    build.__name__ = function.name.lower()
    return build


sum_of = _aggregate(AggregateFunction.SUM)
count_of = _aggregate(AggregateFunction.COUNT)
avg_of = _aggregate(AggregateFunction.AVG)
min_of = _aggregate(AggregateFunction.MIN)
max_of = _aggregate(AggregateFunction.MAX)


def func(name: str, *columns: str) -> SQLCondition:
    """N-ary function form, e.g. ``func("CONCAT", "first", "last")``."""
    return SQLCondition(name, columns)
