"""Audit storage for nuke runs.

Stores and retrieves audit logs in YAML format for compliance and troubleshooting.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Sequence

import yaml

from ..models.deletion_operation import DeletionOperation
from ..models.deletion_record import DeletionRecord
from .filters import as_utc


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


class AuditStorage:
    """Audit log storage and retrieval.

    Stores nuke run audit logs as YAML files organized by year/month.
    Supports querying operations by date range and retrieving detailed operation logs.

    Storage structure:
        ~/.cloudnuke/audit-logs/
            2025/
                11/
                    operation-op_123.yaml
                    operation-op_456.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.cloudnuke/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".cloudnuke" / "audit-logs")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_operation(self, operation: DeletionOperation, records: Sequence[DeletionRecord]) -> Path:
        """Log nuke run to audit storage.

        Creates YAML file with operation metadata and all deletion records.
        Overwrites existing log if operation ID already exists.

        Args:
            operation: Deletion operation to log
            records: Deletion records for this operation

        Returns:
            Path of the written audit file
        """
        timestamp = as_utc(operation.timestamp)
        year_month_dir = self.storage_dir / str(timestamp.year) / f"{timestamp.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "resource_nuke",
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            "operation": {
                "operation_id": operation.operation_id,
                "timestamp": _isoformat(operation.timestamp),
                "aws_profile": operation.aws_profile,
                "mode": operation.mode.value,
                "status": operation.status.value,
                "regions": list(operation.regions),
                "resource_types": list(operation.resource_types),
                "total_resources": operation.total_resources,
                "succeeded_count": operation.succeeded_count,
                "failed_count": operation.failed_count,
                "tagged_count": operation.tagged_count,
                "general_error_count": operation.general_error_count,
                "started_at": _isoformat(operation.started_at),
                "completed_at": _isoformat(operation.completed_at),
                "duration_seconds": operation.duration_seconds,
            },
            "records": [record.to_dict() for record in records],
        }

        audit_file = year_month_dir / f"operation-{operation.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.dump(audit_data, f, default_flow_style=False, sort_keys=False)
        return audit_file

    def get_operation(self, operation_id: str) -> Optional[dict]:
        """Retrieve operation audit log by ID.

        Args:
            operation_id: Operation ID to retrieve

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/operation-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)
        return None

    def query_operations(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[dict]:
        """Query operations within date range.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all

        Returns:
            Operation audit logs matching criteria, oldest first
        """
        results = []
        for audit_file in self._audit_files():
            with open(audit_file, "r") as f:
                audit_data = yaml.safe_load(f)

            timestamp = as_utc(datetime.fromisoformat(audit_data["operation"]["timestamp"]))
            if since and timestamp < as_utc(since):
                continue
            if until and timestamp > as_utc(until):
                continue

            results.append(audit_data)

        results.sort(key=lambda data: data["operation"]["timestamp"])
        return results

    def _audit_files(self) -> Iterator[Path]:
        for year_dir in sorted(self.storage_dir.glob("*")):
            if not year_dir.is_dir():
                continue
            for month_dir in sorted(year_dir.glob("*")):
                if not month_dir.is_dir():
                    continue
                yield from sorted(month_dir.glob("operation-*.yaml"))
