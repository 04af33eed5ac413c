"""SELECT builders.

QueryBuilder renders ``SELECT * FROM t [WHERE ..] [GROUP BY ..] [HAVING ..]``
from accumulated clauses. Literals become bound parameters; identifiers are
quoted by the dialect. ConditionBuilder wraps a QueryBuilder for one entity,
checks column names against its metadata and maps the result rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import ValidationError

from row_orm.core.enums import AggregateFunction
from row_orm.core.exceptions import QueryBuildError
from row_orm.core.params import ParamBinder
from row_orm.dialects import BaseDialect
from row_orm.mapping.metadata import ColumnDescriptor
from row_orm.mapping.protocol import RowMapper
from row_orm.query.conditions import SQLCondition

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueryBuilder:
    """Append-only SELECT builder.

    Args:
        dialect: Dialect used to quote identifiers.
        table: Optional target table; may be set later with ``from_table``.
    """

    def __init__(self, dialect: BaseDialect, table: str | None = None) -> None:
        self._dialect = dialect
        self._table = table
        self._where: list[tuple[str, Any]] = []
        self._group_by: list[str] = []
        self._having: list[SQLCondition] = []

    def from_table(self, table: str) -> QueryBuilder:
        if self._table is not None and self._table != table:
            raise QueryBuildError(f"Target table already set to {self._table!r}")
        self._table = table
        return self

    def where(self, column: str, value: Any) -> QueryBuilder:
        """Append ``column = value``; None renders ``IS NULL``."""
        self._where.append((column, value))
        return self

    def group_by(self, *columns: str) -> QueryBuilder:
        self._group_by.extend(columns)
        return self

    def having(self, condition: SQLCondition) -> QueryBuilder:
        self._having.append(condition)
        return self

    def build(self) -> tuple[str, dict[str, Any]]:
        """Render the statement and its parameters.

        Raises:
            QueryBuildError: If no target table was set.
        """
        if not self._table:
            raise QueryBuildError("No target table set; call from_table() first")

        quote = self._dialect.quote_identifier
        binder = ParamBinder()
        sql = f"SELECT * FROM {quote(self._table)}"

        if self._where:
            predicates = [
                f"{quote(column)} IS NULL"
                if value is None
                else f"{quote(column)} = {binder.bind(value)}"
                for column, value in self._where
            ]
            sql += " WHERE " + " AND ".join(predicates)
        if self._group_by:
            sql += " GROUP BY " + ", ".join(quote(c) for c in self._group_by)
        if self._having:
            sql += " HAVING " + " AND ".join(c.render(quote, binder.bind) for c in self._having)

        return sql, binder.params


class ConditionBuilder(Generic[T]):
    """Filtered, grouped and aggregate-having queries for one entity.

    Obtained from ``Repository.find_with_conditions()``. Column arguments may
    be field names or column names. A builder runs once; it cannot be
    executed again or extended after ``execute()``.

    Example::

        users = (
            repo.find_with_conditions()
            .where("username", "JohnDoe")
            .group_by("username", "id")
            .having(AggregateFunction.SUM, ["id"], ">", 0)
            .execute()
        )
    """

    def __init__(self, engine: Engine, mapper: RowMapper[T]) -> None:
        self._engine = engine
        self._mapper = mapper
        self._descriptor = mapper.descriptor
        self._query = QueryBuilder(engine.dialect, self._descriptor.table)
        self._executed = False

    def _ensure_open(self) -> None:
        if self._executed:
            raise QueryBuildError("Query already executed; build a new one")

    def _column(self, key: str) -> ColumnDescriptor:
        column = self._descriptor.column(key)
        if column is None:
            raise QueryBuildError(f"{self._descriptor.name} has no column or field {key!r}")
        return column

    def where(self, column: str, value: Any) -> ConditionBuilder[T]:
        """Equality predicate; the value is coerced to the column's type."""
        self._ensure_open()
        col = self._column(column)
        try:
            coerced = self._mapper.coerce(col, value)
        except ValidationError as e:
            raise QueryBuildError(
                f"Value {value!r} does not fit column {col.name!r} of {self._descriptor.name}"
            ) from e
        self._query.where(col.name, coerced)
        return self

    def group_by(self, *columns: str) -> ConditionBuilder[T]:
        self._ensure_open()
        self._query.group_by(*(self._column(c).name for c in columns))
        return self

    def having(
        self,
        function_or_condition: SQLCondition | AggregateFunction | str,
        columns: str | Sequence[str] | None = None,
        operator: str | None = None,
        value: Any = None,
    ) -> ConditionBuilder[T]:
        """Aggregate predicate, rendered as ``FUNC(col[, col...]) [operator value]``.

        Pass either a ready SQLCondition, or a function with its columns and
        an optional operator/value pair.
        """
        self._ensure_open()
        if isinstance(function_or_condition, SQLCondition):
            if columns is not None or operator is not None or value is not None:
                raise QueryBuildError("Pass either an SQLCondition or function arguments, not both")
            condition = function_or_condition
        else:
            if columns is None:
                raise QueryBuildError("having() needs the columns the function applies to")
            if (operator is None) != (value is None):
                raise QueryBuildError("having() needs both an operator and a value, or neither")
            names = (columns,) if isinstance(columns, str) else tuple(columns)
            condition = SQLCondition(function_or_condition, names)
            if operator is not None:
                condition = condition.with_operator(operator, value)

        resolved = tuple(self._column(c).name for c in condition.columns)
        self._query.having(replace(condition, columns=resolved))
        return self

    def build(self) -> tuple[str, dict[str, Any]]:
        """Render without executing."""
        return self._query.build()

    def execute(self) -> list[T]:
        """Run the query and map every row."""
        self._ensure_open()
        self._executed = True
        sql, params = self._query.build()
        rows = self._engine.fetch_all(sql, params)
        logger.debug("%s query returned %d row(s)", self._descriptor.name, len(rows))
        return self._mapper.map_many(rows)
