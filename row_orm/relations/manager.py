"""Relation integrity checks run before writes and deletes.

The manager never writes. It counts rows in related tables and reports
whether the pending save, insert or delete keeps every declared association
intact:

    ManyToOne / OneToOne   save: the referenced row must exist
    OneToMany              save: listed child keys must exist
                           delete: no child row may still point here
    ManyToMany             save: every listed key must exist
                           delete: no link row may remain in the join table

Configuration problems are raised before any statement is issued.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from row_orm.core.enums import RelationKind
from row_orm.core.exceptions import (
    DanglingReferenceError,
    DependentRowsExistError,
    MissingPrimaryKeyError,
    RelationConfigurationError,
    UnknownEntityError,
)
from row_orm.mapping.metadata import ColumnDescriptor, EntityDescriptor, RelationshipDescriptor
from row_orm.mapping.model import EntityMapper
from row_orm.relations.checks import RelationCheck, RelationReport

if TYPE_CHECKING:
    from row_orm.core.engine import ConnectionScope
    from row_orm.core.registry import EntityRegistry

logger = logging.getLogger(__name__)


def _is_key_collection(value: Any) -> bool:
    return isinstance(value, Collection) and not isinstance(value, (str, bytes, Mapping))


class RelationIntegrityManager:
    """Validates relationship metadata and related rows for one registry.

    Args:
        registry: Registry used to resolve relationship targets by name.
    """

    def __init__(self, registry: EntityRegistry) -> None:
        self._registry = registry
        self._validated: set[type] = set()
        self._mappers: dict[type, EntityMapper[Any]] = {}

    # --- Configuration ---

    def validate_configuration(self, descriptor: EntityDescriptor) -> None:
        """Check every relationship declaration of an entity.

        Raises:
            RelationConfigurationError: If a required attribute is missing,
                the target entity is unknown, or ``mapped_by`` names no column
                of the target.
        """
        if descriptor.entity_type in self._validated:
            return
        for relation in descriptor.relationships:
            self._target(descriptor, relation)
        self._validated.add(descriptor.entity_type)

    def _target(
        self, descriptor: EntityDescriptor, relation: RelationshipDescriptor
    ) -> EntityDescriptor:
        def fail(detail: str) -> RelationConfigurationError:
            return RelationConfigurationError(descriptor.name, relation.field_name, detail)

        kind = relation.kind
        if not relation.target_entity:
            raise fail("target_entity is required")
        if kind in (RelationKind.ONE_TO_MANY, RelationKind.MANY_TO_MANY) and not relation.mapped_by:
            raise fail(f"mapped_by is required for {kind.name}")
        if kind is RelationKind.MANY_TO_MANY and not relation.join_table:
            raise fail("join_table is required for MANY_TO_MANY")

        try:
            target = self._registry.lookup(relation.target_entity)
        except UnknownEntityError as e:
            raise fail(f"target entity '{relation.target_entity}' is not registered") from e

        # ManyToMany mapped_by names a join-table column, which has no metadata.
        if relation.mapped_by and kind is not RelationKind.MANY_TO_MANY:
            if target.column(relation.mapped_by) is None:
                raise fail(f"mapped_by '{relation.mapped_by}' is not a column of {target.name}")
        return target

    def _mapper(self, descriptor: EntityDescriptor) -> EntityMapper[Any]:
        mapper = self._mappers.get(descriptor.entity_type)
        if mapper is None:
            mapper = EntityMapper(descriptor)
            self._mappers[descriptor.entity_type] = mapper
        return mapper

    # --- Queries ---

    def _coerce(self, target: EntityDescriptor, column: ColumnDescriptor, value: Any) -> Any:
        return self._mapper(target).coerce(column, value)

    def _missing_reference(
        self,
        scope: ConnectionScope,
        descriptor: EntityDescriptor,
        relation: RelationshipDescriptor,
        target: EntityDescriptor,
        key_column: ColumnDescriptor,
        value: Any,
    ) -> DanglingReferenceError | None:
        """Return an error if no ``target`` row has ``key_column = value``."""
        error = DanglingReferenceError(descriptor.name, relation.field_name, target.name, value)
        try:
            key = self._coerce(target, key_column, value)
        except ValidationError:
            logger.info(
                "%s.%s: %r is not a valid %s key",
                descriptor.name,
                relation.field_name,
                value,
                target.name,
            )
            return error

        sql = scope.dialect.render_count(target.table, key_column.name)
        count = scope.fetch_scalar(sql, {"key": key})
        if not count:
            logger.info(
                "%s.%s: no %s with %s=%r",
                descriptor.name,
                relation.field_name,
                target.name,
                key_column.name,
                key,
            )
            return error
        return None

    def _dependents(
        self,
        scope: ConnectionScope,
        table: str,
        column: str,
        key: Any,
    ) -> int:
        sql = scope.dialect.render_count(table, column)
        return int(scope.fetch_scalar(sql, {"key": key}) or 0)

    # --- Save ---

    def inspect_before_save(
        self,
        entity: Any,
        scope: ConnectionScope,
        require_primary_key: bool = False,
    ) -> RelationReport:
        """Check the related rows an entity refers to.

        Raises:
            RelationConfigurationError: On a broken relationship declaration,
                or a ManyToMany field that does not hold a collection.
        """
        descriptor = self._registry.resolve(type(entity))
        self.validate_configuration(descriptor)
        checks: list[RelationCheck] = []

        if require_primary_key and descriptor.primary_key_value(entity) is None:
            pk = descriptor.primary_key
            error = MissingPrimaryKeyError(descriptor.name)
            checks.append(RelationCheck.failed(pk.field_name, None, error))
            return RelationReport(descriptor.name, tuple(checks))

        for relation in descriptor.relationships:
            target = self._target(descriptor, relation)
            value = getattr(entity, relation.field_name)
            error = self._check_save(scope, descriptor, relation, target, value)
            if error is None:
                checks.append(RelationCheck.ok(relation.field_name, relation.kind))
            else:
                checks.append(RelationCheck.failed(relation.field_name, relation.kind, error))
                break

        return RelationReport(descriptor.name, tuple(checks))

    def _check_save(
        self,
        scope: ConnectionScope,
        descriptor: EntityDescriptor,
        relation: RelationshipDescriptor,
        target: EntityDescriptor,
        value: Any,
    ) -> DanglingReferenceError | None:
        if value is None:
            return None

        if relation.kind.is_outgoing:
            key_column = target.column(relation.mapped_by) if relation.mapped_by else None
            return self._missing_reference(
                scope, descriptor, relation, target, key_column or target.primary_key, value
            )

        if relation.kind is RelationKind.MANY_TO_MANY and not _is_key_collection(value):
            raise RelationConfigurationError(
                descriptor.name,
                relation.field_name,
                f"MANY_TO_MANY field must hold a collection of keys, got {type(value).__name__}",
            )

        # OneToMany fields holding a single value carry nothing to verify.
        if not _is_key_collection(value):
            return None

        pk = target.primary_key
        for key in value:
            error = self._missing_reference(scope, descriptor, relation, target, pk, key)
            if error is not None:
                return error
        return None

    def check_before_save(self, entity: Any, scope: ConnectionScope) -> None:
        """Raise the first failed save check."""
        self.inspect_before_save(entity, scope).raise_for_failure()

    def check_before_insert(self, entity: Any, scope: ConnectionScope) -> None:
        """Like check_before_save, and the primary key must be set."""
        self.inspect_before_save(entity, scope, require_primary_key=True).raise_for_failure()

    # --- Delete ---

    def inspect_before_delete(self, entity: Any, scope: ConnectionScope) -> RelationReport:
        """Check that no child or link rows still reference an entity."""
        descriptor = self._registry.resolve(type(entity))
        self.validate_configuration(descriptor)
        pk_value = descriptor.primary_key_value(entity)
        checks: list[RelationCheck] = []

        for relation in descriptor.relationships:
            target = self._target(descriptor, relation)
            if relation.kind.is_outgoing:
                checks.append(RelationCheck.ok(relation.field_name, relation.kind))
                continue

            if pk_value is None:
                error = MissingPrimaryKeyError(descriptor.name)
                checks.append(RelationCheck.failed(relation.field_name, relation.kind, error))
                break

            if relation.kind is RelationKind.ONE_TO_MANY:
                fk = target.column(relation.mapped_by)
                if fk is None:
                    raise RelationConfigurationError(
                        descriptor.name,
                        relation.field_name,
                        f"mapped_by '{relation.mapped_by}' is not a column of {target.name}",
                    )
                try:
                    key = self._coerce(target, fk, pk_value)
                except ValidationError:
                    # No child row can hold a key of the wrong type.
                    checks.append(RelationCheck.ok(relation.field_name, relation.kind))
                    continue
                count = self._dependents(scope, target.table, fk.name, key)
                source = target.table
            else:
                count = self._dependents(scope, relation.join_table, relation.mapped_by, pk_value)
                source = relation.join_table

            if count > 0:
                logger.info(
                    "Delete of %s id=%r blocked by %d row(s) in %s",
                    descriptor.name,
                    pk_value,
                    count,
                    source,
                )
                error = DependentRowsExistError(descriptor.name, pk_value, count, source)
                checks.append(RelationCheck.failed(relation.field_name, relation.kind, error))
                break
            checks.append(RelationCheck.ok(relation.field_name, relation.kind))

        return RelationReport(descriptor.name, tuple(checks))

    def check_before_delete(self, entity: Any, scope: ConnectionScope) -> None:
        """Raise the first failed delete check."""
        self.inspect_before_delete(entity, scope).raise_for_failure()
