"""Row-to-entity mapper.

Builds entity instances from row dicts using resolved EntityDescriptor
metadata. Column values are coerced to the declared field types with a
pydantic TypeAdapter per column.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import ConfigDict, TypeAdapter, ValidationError

from row_orm.core.exceptions import RowMappingError
from row_orm.mapping.metadata import ColumnDescriptor, EntityDescriptor

T = TypeVar("T")

_COERCION_CONFIG = ConfigDict(coerce_numbers_to_str=True)


class EntityMapper(Generic[T]):
    """Map row dicts onto one entity type.

    Columns are matched by exact name first, then case-insensitively, since
    some engines fold unquoted names. Relationship-only fields keep their
    declared defaults.

    Args:
        descriptor: Resolved metadata of the target entity.
    """

    def __init__(self, descriptor: EntityDescriptor) -> None:
        self._descriptor = descriptor
        self._adapters: dict[str, TypeAdapter[Any]] = {}

    @property
    def descriptor(self) -> EntityDescriptor:
        return self._descriptor

    def _adapter(self, column: ColumnDescriptor) -> TypeAdapter[Any]:
        adapter = self._adapters.get(column.name)
        if adapter is None:
            adapter = TypeAdapter(column.python_type, config=_COERCION_CONFIG)
            self._adapters[column.name] = adapter
        return adapter

    def coerce(self, column: ColumnDescriptor, value: Any) -> Any:
        """Coerce a value to the column's declared type.

        Raises:
            pydantic.ValidationError: If the value cannot be converted.
        """
        if value is None:
            return None
        return self._adapter(column).validate_python(value)

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row to an entity instance."""
        folded: dict[str, str] | None = None
        kwargs: dict[str, Any] = {}
        for column in self._descriptor.columns:
            key = column.name
            if key not in row:
                if folded is None:
                    folded = {k.lower(): k for k in row}
                key = folded.get(column.name.lower(), "")
                if not key:
                    raise RowMappingError(
                        self._descriptor.name,
                        f"column '{column.name}' is missing from the result row",
                    )
            try:
                kwargs[column.field_name] = self.coerce(column, row[key])
            except ValidationError as e:
                raise RowMappingError(
                    self._descriptor.name,
                    f"column '{column.name}' value {row[key]!r}: {e.errors()[0]['msg']}",
                ) from e
        return self._descriptor.entity_type(**kwargs)  # type: ignore[no-any-return]

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map all rows via map_one."""
        return [self.map_one(row) for row in rows]
