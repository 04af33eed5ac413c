"""Entity declarations and the metadata resolver.

Entities are dataclasses decorated with ``@entity``::

    @entity(table="Posts")
    @dataclass
    class Post:
        id: int = column(primary_key=True)
        user_id: str | None = column("userId", relation=ManyToOne(target_entity="User"))
        content: str = ""

Fields without ``column()`` map to a column of the same name. Fields declared
with ``relationship()`` carry an association but no column.

``resolve_entity`` turns such a class into an immutable EntityDescriptor.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import MISSING, dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from row_orm.core.enums import RelationKind
from row_orm.core.exceptions import MetadataError

if TYPE_CHECKING:
    from row_orm.core.registry import EntityRegistry

_COLUMN_KEY = "row_orm.column"
_RELATION_KEY = "row_orm.relation"


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Relation:
    """Association declared on a field.

    Attributes:
        target_entity: Name (or class) of the related entity.
        mapped_by: Field or column on the other side the association is keyed by.
        join_table: Association table; ManyToMany only.
    """

    target_entity: str | type = ""
    mapped_by: str = ""
    join_table: str = ""

    kind: ClassVar[RelationKind]


class OneToOne(Relation):
    kind = RelationKind.ONE_TO_ONE


class ManyToOne(Relation):
    kind = RelationKind.MANY_TO_ONE


class OneToMany(Relation):
    kind = RelationKind.ONE_TO_MANY


class ManyToMany(Relation):
    kind = RelationKind.MANY_TO_MANY


@dataclass(frozen=True)
class _ColumnSpec:
    name: str | None
    primary_key: bool


def column(
    name: str | None = None,
    *,
    primary_key: bool = False,
    relation: Relation | None = None,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a mapped column; ``name`` defaults to the field name."""
    metadata = {_COLUMN_KEY: _ColumnSpec(name, primary_key), _RELATION_KEY: relation}
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata)


def relationship(relation: Relation, *, default: Any = None, default_factory: Any = MISSING) -> Any:
    """Declare an association field that has no column of its own."""
    metadata = {_COLUMN_KEY: None, _RELATION_KEY: relation}
    if default_factory is not MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


def entity(
    table: str,
    *,
    name: str | None = None,
    registry: EntityRegistry | None = None,
) -> Any:
    """Class decorator declaring the table an entity maps to.

    Apply it on top of ``@dataclass``. The class is registered by ``name``
    (default: the class name) so relationships can refer to it.
    """
    from row_orm.core.registry import default_registry

    def decorate(cls: type) -> type:
        cls.__entity_table__ = table  # type: ignore[attr-defined]
        cls.__entity_name__ = name or cls.__name__  # type: ignore[attr-defined]
        target = registry if registry is not None else default_registry
        cls.__entity_registry__ = target  # type: ignore[attr-defined]
        target.register(cls)
        return cls

    return decorate


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnDescriptor:
    """Binding between a record field and a table column."""

    name: str
    field_name: str
    primary_key: bool = False
    python_type: Any = Any


@dataclass(frozen=True)
class RelationshipDescriptor:
    """Association declared on one field of an entity."""

    field_name: str
    kind: RelationKind
    target_entity: str
    mapped_by: str = ""
    join_table: str = ""
    column_name: str | None = None


@dataclass(frozen=True)
class EntityDescriptor:
    """Resolved table, column and relationship facts for one entity type."""

    entity_type: type
    name: str
    table: str
    columns: tuple[ColumnDescriptor, ...]
    relationships: tuple[RelationshipDescriptor, ...] = ()

    @property
    def primary_key(self) -> ColumnDescriptor:
        return next(c for c in self.columns if c.primary_key)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def column(self, key: str) -> ColumnDescriptor | None:
        """Find a column by field name, then by column name."""
        for col in self.columns:
            if col.field_name == key:
                return col
        for col in self.columns:
            if col.name == key:
                return col
        return None

    def field_values(self, instance: Any) -> list[Any]:
        """Column values of *instance*, in column order."""
        return [getattr(instance, c.field_name) for c in self.columns]

    def primary_key_value(self, instance: Any) -> Any:
        return getattr(instance, self.primary_key.field_name)


def entity_name(cls: type) -> str:
    return cls.__dict__.get("__entity_name__") or cls.__name__


def _target_name(target: str | type) -> str:
    if isinstance(target, type):
        return entity_name(target)
    return target


def resolve_entity(cls: type) -> EntityDescriptor:
    """Resolve the EntityDescriptor for a declared entity class.

    Raises:
        MetadataError: If the class is not a dataclass, lacks a table name,
            has zero or several primary keys, repeats or blanks a column name,
            or has a relation-only field without a default.
    """
    name = entity_name(cls)
    if not isinstance(cls, type) or not dataclasses.is_dataclass(cls):
        raise MetadataError(name, "entities must be dataclasses")

    table = cls.__dict__.get("__entity_table__")
    if not isinstance(table, str) or not table:
        raise MetadataError(name, "no table name declared; use @entity(table=...)")

    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise MetadataError(name, f"cannot resolve field annotations: {e}") from e

    columns: list[ColumnDescriptor] = []
    relationships: list[RelationshipDescriptor] = []
    seen: set[str] = set()

    for f in dataclasses.fields(cls):
        spec = f.metadata.get(_COLUMN_KEY, _ColumnSpec(None, False))
        relation: Relation | None = f.metadata.get(_RELATION_KEY)
        column_name: str | None = None

        if spec is None:
            if f.default is MISSING and f.default_factory is MISSING:
                raise MetadataError(name, f"relationship field '{f.name}' needs a default")
        else:
            column_name = f.name if spec.name is None else spec.name
            if not column_name:
                raise MetadataError(name, f"field '{f.name}' has an empty column name")
            if column_name in seen:
                raise MetadataError(name, f"column '{column_name}' is declared twice")
            seen.add(column_name)
            columns.append(
                ColumnDescriptor(
                    name=column_name,
                    field_name=f.name,
                    primary_key=spec.primary_key,
                    python_type=hints.get(f.name, Any),
                )
            )

        if relation is not None:
            relationships.append(
                RelationshipDescriptor(
                    field_name=f.name,
                    kind=relation.kind,
                    target_entity=_target_name(relation.target_entity),
                    mapped_by=relation.mapped_by,
                    join_table=relation.join_table,
                    column_name=column_name,
                )
            )

    primary_keys = [c.name for c in columns if c.primary_key]
    if not primary_keys:
        raise MetadataError(name, "no column is marked primary_key=True")
    if len(primary_keys) > 1:
        raise MetadataError(name, f"multiple primary-key columns {primary_keys}")

    return EntityDescriptor(
        entity_type=cls,
        name=name,
        table=table,
        columns=tuple(columns),
        relationships=tuple(relationships),
    )
