"""Deletion operation model.

Represents a complete nuke run with metadata, selection and execution context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OperationMode(Enum):
    """Operation execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class OperationStatus(Enum):
    """Operation execution status with state transitions."""

    PLANNED = "planned"
    EXECUTING = "executing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DeletionOperation:
    """Deletion operation entity.

    Represents a complete nuke run. Tracks overall progress and status of
    resource deletion across every region and resource type in the plan.

    State transitions:
        planned → executing → completed (all succeeded)
        planned → executing → partial (some failed)
        planned → executing → failed (nothing succeeded)

    Attributes:
        operation_id: Unique identifier for the operation
        timestamp: When operation was initiated (UTC)
        mode: dry-run or execute
        status: Current execution status
        total_resources: Total resources identified for deletion
        succeeded_count: Number successfully deleted (default: 0)
        failed_count: Number that failed to delete (default: 0)
        tagged_count: Number tagged with a first-seen tag and skipped this run
        general_error_count: Resource-type-scoped errors such as list failures
        aws_profile: AWS profile used for credentials (optional)
        regions: Target regions
        resource_types: Target resource types
        started_at: When execution started (optional, execute mode only)
        completed_at: When execution completed (optional)
    """

    operation_id: str
    timestamp: datetime
    mode: OperationMode
    status: OperationStatus
    total_resources: int
    succeeded_count: int = 0
    failed_count: int = 0
    tagged_count: int = 0
    general_error_count: int = 0
    aws_profile: Optional[str] = None
    regions: list[str] = field(default_factory=list)
    resource_types: list[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - execute mode: succeeded_count + failed_count == total_resources once finished
            - completed_at must be after started_at
            - dry-run mode must have planned status

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.mode == OperationMode.EXECUTE and self.status in (
            OperationStatus.COMPLETED,
            OperationStatus.PARTIAL,
            OperationStatus.FAILED,
        ):
            if self.succeeded_count + self.failed_count != self.total_resources:
                raise ValueError("Resource counts don't match total")

        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        if self.mode == OperationMode.DRY_RUN and self.status != OperationStatus.PLANNED:
            raise ValueError("Dry-run mode must have planned status")

        return True
