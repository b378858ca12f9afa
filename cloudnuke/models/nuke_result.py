"""Nuke result models.

Per-identifier outcomes produced by the batch controller and the aggregated
result returned to the caller at the end of a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .deletion_record import DeletionRecord


@dataclass(frozen=True)
class DeletionOutcome:
    """Outcome of one identifier within a batch."""

    identifier: str
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class GeneralError:
    """Resource-type-scoped error such as a list failure."""

    resource_type: str
    region: str
    description: str
    error_kind: str
    error: Optional[BaseException] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_type": self.resource_type,
            "region": self.region,
            "description": self.description,
            "error_kind": self.error_kind,
        }


@dataclass(frozen=True)
class AggregatedResult:
    """Final, immutable result of a run.

    Attributes:
        succeeded: Records for identifiers deleted (or already gone)
        failed: Records for identifiers that could not be deleted
        general_errors: Resource-type-scoped errors
    """

    succeeded: tuple[DeletionRecord, ...] = ()
    failed: tuple[DeletionRecord, ...] = ()
    general_errors: tuple[GeneralError, ...] = ()

    @property
    def records(self) -> tuple[DeletionRecord, ...]:
        return self.succeeded + self.failed

    @property
    def has_failures(self) -> bool:
        return bool(self.failed or self.general_errors)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def succeeded_identifiers(self) -> list[str]:
        return [r.identifier for r in self.succeeded]

    @property
    def failed_identifiers(self) -> list[str]:
        return [r.identifier for r in self.failed]

    def by_resource_type(self) -> dict[str, dict[str, int]]:
        """Count succeeded/failed records per resource type."""
        counts: dict[str, dict[str, int]] = {}
        for record in self.records:
            bucket = counts.setdefault(record.resource_type, {"succeeded": 0, "failed": 0})
            bucket["succeeded" if record.succeeded else "failed"] += 1
        return counts
