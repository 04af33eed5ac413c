"""Row mapper protocol.

ConditionBuilder and Repository only need a mapper that exposes the entity
metadata, coerces single values to a column's type and turns rows into
entities. EntityMapper is the implementation shipped with the package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from row_orm.mapping.metadata import ColumnDescriptor, EntityDescriptor

T = TypeVar("T")


@runtime_checkable
class RowMapper(Protocol[T]):
    """Maps rows of one entity's table to entity instances."""

    @property
    def descriptor(self) -> EntityDescriptor: ...

    def coerce(self, column: ColumnDescriptor, value: Any) -> Any:
        """Convert a value to the column's Python type; None passes through."""
        ...

    def map_one(self, row: dict[str, Any]) -> T: ...

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]: ...
