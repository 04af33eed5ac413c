"""RowORM exception hierarchy.

Every public operation raises one of these. Raw driver exceptions are wrapped
in StorageError and chained, never exposed bare.
"""

from __future__ import annotations

from typing import Any


class RowORMError(Exception):
    """Base exception for all RowORM errors."""


# --- Metadata ---


class MetadataError(RowORMError):
    """Raised when an entity declaration cannot be resolved."""

    def __init__(self, entity_name: str, detail: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Invalid entity '{entity_name}': {detail}")


class UnknownEntityError(MetadataError):
    """Raised when an entity name is not registered."""

    def __init__(self, entity_name: str) -> None:
        super().__init__(entity_name, "no entity is registered under this name")


class EntityTypeError(RowORMError, TypeError):
    """Raised when a repository is handed an instance of another entity type."""

    def __init__(self, entity_name: str, got: type) -> None:
        self.entity_name = entity_name
        self.got = got
        super().__init__(f"Expected a {entity_name} instance, got {got.__name__}")


# --- Dialect ---


class UnsupportedDialectError(RowORMError):
    """Raised for an engine identifier with no dialect or adapter."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Unsupported database type: '{identifier}'")


# --- Relations ---


class RelationConfigurationError(RowORMError):
    """Raised when a relationship declaration lacks a required attribute."""

    def __init__(self, entity_name: str, field_name: str, detail: str) -> None:
        self.entity_name = entity_name
        self.field_name = field_name
        super().__init__(f"{entity_name}.{field_name}: {detail}")


class RelationIntegrityError(RowORMError):
    """Base for relation checks that fail against stored data."""


class DanglingReferenceError(RelationIntegrityError):
    """Raised when a referenced row does not exist."""

    def __init__(self, entity_name: str, field_name: str, target: str, value: Any) -> None:
        self.entity_name = entity_name
        self.field_name = field_name
        self.target = target
        self.value = value
        super().__init__(
            f"{entity_name}.{field_name} references {target} with key {value!r}, "
            "but that record does not exist"
        )


class DependentRowsExistError(RelationIntegrityError):
    """Raised when a delete is blocked by child rows or join-table links."""

    def __init__(self, entity_name: str, key: Any, count: int, source: str) -> None:
        self.entity_name = entity_name
        self.key = key
        self.count = count
        self.source = source
        super().__init__(
            f"Cannot delete {entity_name} (id={key!r}): {count} dependent row(s) in {source}"
        )


class MissingPrimaryKeyError(RelationIntegrityError):
    """Raised when a relation check needs a primary key the entity does not have."""

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"{entity_name} has no primary key value set")


# --- Query building ---


class QueryBuildError(RowORMError):
    """Raised on query builder misuse."""


class SQLSanitizationError(RowORMError):
    """Raised when a raw SQL string fails a sanitization check."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"SQL sanitization failed: {detail}")


# --- Mapping ---


class RowMappingError(RowORMError):
    """Raised when a result row does not fit the entity shape."""

    def __init__(self, entity_name: str, detail: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Cannot map row to {entity_name}: {detail}")


# --- Storage ---


class StorageError(RowORMError):
    """Raised when the database rejects a statement."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        self.detail = detail
        super().__init__(detail)


class ConnectionError(StorageError):  # noqa: A001
    """Raised when a connection cannot be opened."""

    def __init__(self, driver: str, detail: str) -> None:
        self.driver = driver
        super().__init__("", f"Cannot connect to {driver}: {detail}")
