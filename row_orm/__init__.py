"""RowORM - metadata-driven mapping and relation integrity for SQL tables."""

from __future__ import annotations

from row_orm.core.connection import ConnectionConfig, ConnectionManager
from row_orm.core.engine import ConnectionScope, Engine
from row_orm.core.enums import AggregateFunction, DatabaseBackend, RelationKind
from row_orm.core.exceptions import (
    ConnectionError,  # noqa: A004
    DanglingReferenceError,
    DependentRowsExistError,
    EntityTypeError,
    MetadataError,
    MissingPrimaryKeyError,
    QueryBuildError,
    RelationConfigurationError,
    RelationIntegrityError,
    RowMappingError,
    RowORMError,
    SQLSanitizationError,
    StorageError,
    UnknownEntityError,
    UnsupportedDialectError,
)
from row_orm.core.registry import EntityRegistry, default_registry
from row_orm.core.sanitizer import SQLSanitizer
from row_orm.dialects import get_dialect
from row_orm.mapping import (
    EntityDescriptor,
    EntityMapper,
    ManyToMany,
    ManyToOne,
    OneToMany,
    OneToOne,
    column,
    entity,
    relationship,
    resolve_entity,
)
from row_orm.query import ConditionBuilder, QueryBuilder, SQLCondition
from row_orm.relations import RelationIntegrityManager, RelationReport
from row_orm.repository import Repository, execute_raw_query

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Engine
    "Engine",
    "ConnectionScope",
    "get_dialect",
    # Declarations
    "entity",
    "column",
    "relationship",
    "OneToOne",
    "ManyToOne",
    "OneToMany",
    "ManyToMany",
    # Metadata
    "EntityDescriptor",
    "EntityRegistry",
    "default_registry",
    "resolve_entity",
    "EntityMapper",
    # Queries
    "QueryBuilder",
    "ConditionBuilder",
    "SQLCondition",
    "SQLSanitizer",
    # Relations
    "RelationIntegrityManager",
    "RelationReport",
    # Repository
    "Repository",
    "execute_raw_query",
    # Enums
    "AggregateFunction",
    "DatabaseBackend",
    "RelationKind",
    # Exceptions
    "RowORMError",
    "MetadataError",
    "UnknownEntityError",
    "EntityTypeError",
    "UnsupportedDialectError",
    "RelationConfigurationError",
    "RelationIntegrityError",
    "DanglingReferenceError",
    "DependentRowsExistError",
    "MissingPrimaryKeyError",
    "QueryBuildError",
    "SQLSanitizationError",
    "RowMappingError",
    "StorageError",
    "ConnectionError",
]
