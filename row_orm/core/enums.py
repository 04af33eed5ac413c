"""Enumerations shared across the package."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class RelationKind(Enum):
    """Kinds of declared associations between entities."""

    ONE_TO_ONE = "one_to_one"
    MANY_TO_ONE = "many_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"

    @property
    def is_outgoing(self) -> bool:
        """True when the field holds a key of the target entity."""
        return self in (RelationKind.ONE_TO_ONE, RelationKind.MANY_TO_ONE)


class AggregateFunction(Enum):
    """SQL aggregate functions accepted in HAVING conditions."""

    SUM = "SUM"
    COUNT = "COUNT"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"
