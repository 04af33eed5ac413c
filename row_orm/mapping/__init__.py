"""Mapping layer - entity declarations and row-to-entity mapping."""

from __future__ import annotations

from row_orm.mapping.metadata import (
    ColumnDescriptor,
    EntityDescriptor,
    ManyToMany,
    ManyToOne,
    OneToMany,
    OneToOne,
    Relation,
    RelationshipDescriptor,
    column,
    entity,
    relationship,
    resolve_entity,
)
from row_orm.mapping.model import EntityMapper
from row_orm.mapping.protocol import RowMapper

__all__ = [
    "entity",
    "column",
    "relationship",
    "resolve_entity",
    "Relation",
    "OneToOne",
    "ManyToOne",
    "OneToMany",
    "ManyToMany",
    "ColumnDescriptor",
    "RelationshipDescriptor",
    "EntityDescriptor",
    "EntityMapper",
    "RowMapper",
]
