"""Generic repository driven by entity metadata.

Each write runs its relation checks and its statement inside one
``Engine.scope()``, so a failed check leaves the table untouched and the
check and the write share one transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from row_orm.core.connection import ConnectionConfig
from row_orm.core.engine import Engine
from row_orm.core.exceptions import EntityTypeError, QueryBuildError
from row_orm.core.registry import EntityRegistry, registry_for
from row_orm.core.sanitizer import SQLSanitizer
from row_orm.mapping.model import EntityMapper
from row_orm.mapping.protocol import RowMapper
from row_orm.query.builder import ConditionBuilder
from row_orm.relations.manager import RelationIntegrityManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


def execute_raw_query(
    sql: str,
    *,
    engine: Engine,
    sanitizer: SQLSanitizer | None = None,
    params: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """Run hand-written SQL and return plain row dicts.

    Bare ``FROM <name>`` references are quoted for the engine's dialect;
    string literals and quoted identifiers are left alone. No metadata or
    relation checks apply.

    Raises:
        SQLSanitizationError: If ``sanitizer`` rejects the statement.
        StorageError: If the database rejects the statement. The driver's
            message is kept as-is and the driver exception is chained.
    """
    if sanitizer is not None:
        sql = sanitizer.sanitize(sql)
    return engine.fetch_all(engine.dialect.quote_from_tables(sql), params)


class Repository(Generic[T]):
    """CRUD and query operations for one entity type.

    Args:
        entity_type: Declared entity class.
        engine: Engine to run statements on.
        registry: Registry for relationship targets. Defaults to the one the
            entity was declared with.
        relations: Relation manager; one is created for ``registry`` if omitted.
        mapper: Row mapper for the entity; an EntityMapper over its metadata
            if omitted.

    Raises:
        MetadataError: If the entity declaration is malformed.
    """

    def __init__(
        self,
        entity_type: type[T],
        engine: Engine,
        *,
        registry: EntityRegistry | None = None,
        relations: RelationIntegrityManager | None = None,
        mapper: RowMapper[T] | None = None,
    ) -> None:
        self.engine = engine
        self.registry = registry if registry is not None else registry_for(entity_type)
        self.descriptor = self.registry.resolve(entity_type)
        self.mapper: RowMapper[T] = mapper if mapper is not None else EntityMapper(self.descriptor)
        self.relations = relations or RelationIntegrityManager(self.registry)

    @classmethod
    def from_config(
        cls,
        entity_type: type[T],
        config: ConnectionConfig,
        **kwargs: Any,
    ) -> Repository[T]:
        """Build a repository with its own Engine for ``config``."""
        return cls(entity_type, Engine.from_config(config), **kwargs)

    execute_raw_query = staticmethod(execute_raw_query)

    def _check_instance(self, entity: Any) -> None:
        if not isinstance(entity, self.descriptor.entity_type):
            raise EntityTypeError(self.descriptor.name, type(entity))

    def _key(self, id: Any) -> Any:
        pk = self.descriptor.primary_key
        try:
            return self.mapper.coerce(pk, id)
        except ValidationError as e:
            raise QueryBuildError(
                f"{id!r} is not a valid {self.descriptor.name}.{pk.field_name}"
            ) from e

    def _values(self, entity: Any) -> dict[str, Any]:
        return self.engine.dialect.bind_values(self.descriptor.field_values(entity))

    # --- Writes ---

    def save(self, entity: T) -> None:
        """Insert or update ``entity`` after checking its references.

        Raises:
            RelationConfigurationError: On a broken relationship declaration.
            DanglingReferenceError: If a referenced row does not exist.
            StorageError: If the database rejects the statement.
        """
        self._check_instance(entity)
        d = self.descriptor
        sql = self.engine.dialect.render_upsert(d.table, d.column_names, d.primary_key.name)
        with self.engine.scope() as scope:
            self.relations.check_before_save(entity, scope)
            scope.execute(sql, self._values(entity))
        logger.debug("Saved %s id=%r", d.name, d.primary_key_value(entity))

    def insert(self, entity: T) -> None:
        """Insert ``entity``; fails if the primary key is unset or already taken.

        Raises:
            MissingPrimaryKeyError: If the primary-key field is None.
            DanglingReferenceError: If a referenced row does not exist.
            StorageError: If the database rejects the statement.
        """
        self._check_instance(entity)
        d = self.descriptor
        sql = self.engine.dialect.render_insert(d.table, d.column_names)
        with self.engine.scope() as scope:
            self.relations.check_before_insert(entity, scope)
            scope.execute(sql, self._values(entity))

    def update(self, entity: T) -> int:
        """Update the row with the entity's primary key. Returns affected row count."""
        self._check_instance(entity)
        d = self.descriptor
        sql = self.engine.dialect.render_update(d.table, d.column_names, d.primary_key.name)
        with self.engine.scope() as scope:
            self.relations.check_before_save(entity, scope)
            return scope.execute(sql, self._values(entity))

    def delete(self, id: Any) -> None:
        """Delete the entity with primary key ``id``; a missing row is a no-op.

        Raises:
            DependentRowsExistError: If child rows or join-table links still
                reference the entity.
            StorageError: If the database rejects the statement.
        """
        d = self.descriptor
        dialect = self.engine.dialect
        params = {"key": self._key(id)}
        with self.engine.scope() as scope:
            row = scope.fetch_one(dialect.render_select(d.table, d.primary_key.name), params)
            if row is None:
                logger.debug("Delete of %s id=%r skipped: no such row", d.name, id)
                return
            self.relations.check_before_delete(self.mapper.map_one(row), scope)
            scope.execute(dialect.render_delete(d.table, d.primary_key.name), params)

    # --- Reads ---

    def find_by_id(self, id: Any) -> T | None:
        d = self.descriptor
        sql = self.engine.dialect.render_select(d.table, d.primary_key.name)
        row = self.engine.fetch_one(sql, {"key": self._key(id)})
        return self.mapper.map_one(row) if row is not None else None

    def exists(self, id: Any) -> bool:
        d = self.descriptor
        sql = self.engine.dialect.render_count(d.table, d.primary_key.name)
        return bool(self.engine.fetch_scalar(sql, {"key": self._key(id)}))

    def find_all(self) -> list[T]:
        rows = self.engine.fetch_all(self.engine.dialect.render_select(self.descriptor.table))
        return self.mapper.map_many(rows)

    def find_by(self, **criteria: Any) -> list[T]:
        """Entities whose fields equal all given values."""
        builder = self.find_with_conditions()
        for name, value in criteria.items():
            builder.where(name, value)
        return builder.execute()

    def find_with_conditions(self) -> ConditionBuilder[T]:
        """A fresh query builder bound to this entity's table."""
        return ConditionBuilder(self.engine, self.mapper)
