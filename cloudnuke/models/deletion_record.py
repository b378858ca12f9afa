"""Deletion record model.

Individual resource deletion outcome with result and metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class DeletionStatus(Enum):
    """Individual resource deletion status."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class DeletionRecord:
    """Deletion record entity.

    Represents the outcome for a single identifier in a run. Exactly one record
    is produced per identifier per run.

    Validation rules:
        - status=succeeded: no error_kind
        - status=failed: requires error_kind
        - already_gone only on succeeded records

    Attributes:
        resource_type: Resource type name (e.g., "iam-role")
        region: Region or "global"
        identifier: Resource identifier
        status: Deletion outcome (succeeded, failed)
        timestamp: When the outcome was recorded (UTC)
        error_kind: Error kind value if failed (optional)
        error_message: Human-readable error if failed (optional)
        already_gone: True when the resource was already deleted by someone else
        error: Original exception, kept for the caller but never serialized
    """

    resource_type: str
    region: str
    identifier: str
    status: DeletionStatus
    timestamp: datetime
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    already_gone: bool = False
    error: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status == DeletionStatus.SUCCEEDED

    @property
    def outcome(self) -> str:
        if self.already_gone:
            return "already-gone"
        return "deleted" if self.succeeded else "failed"

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == DeletionStatus.FAILED:
            if not self.error_kind:
                raise ValueError("Failed status requires error_kind")
            if self.already_gone:
                raise ValueError("Failed status cannot be already gone")
        elif self.error_kind:
            raise ValueError("Succeeded status cannot have an error")

        if not self.identifier:
            raise ValueError("Identifier is required")

        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_type": self.resource_type,
            "region": self.region,
            "identifier": self.identifier,
            "outcome": self.outcome,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "error_kind": self.error_kind,
            "error": self.error_message,
        }
