"""Relation check outcomes.

Each relationship field inspected before a write produces a RelationCheck,
either passed or failed with the error that describes the violation. Callers
can branch on a RelationReport or raise its first failure.
"""

from __future__ import annotations

from dataclasses import dataclass

from row_orm.core.enums import RelationKind
from row_orm.core.exceptions import RelationIntegrityError


@dataclass(frozen=True)
class RelationCheck:
    """Outcome of one relation check.

    ``kind`` is None for the primary-key presence check made before inserts.
    """

    field_name: str
    kind: RelationKind | None
    error: RelationIntegrityError | None = None

    @property
    def passed(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, field_name: str, kind: RelationKind | None) -> RelationCheck:
        return cls(field_name, kind)

    @classmethod
    def failed(
        cls, field_name: str, kind: RelationKind | None, error: RelationIntegrityError
    ) -> RelationCheck:
        return cls(field_name, kind, error)


@dataclass(frozen=True)
class RelationReport:
    """Checks in declared-field order; evaluation stops at the first failure."""

    entity_name: str
    checks: tuple[RelationCheck, ...] = ()

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failure(self) -> RelationCheck | None:
        return next((c for c in self.checks if not c.passed), None)

    def raise_for_failure(self) -> None:
        """Raise the error of the first failed check, if any."""
        failure = self.failure
        if failure is not None and failure.error is not None:
            raise failure.error
