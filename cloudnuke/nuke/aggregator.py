"""Result aggregation.

Collects per-identifier outcomes from every batch, resource type and region of a
run into one AggregatedResult. Writes are serialized with a lock because regions
may be processed concurrently.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from ..models.deletion_record import DeletionRecord, DeletionStatus
from ..models.nuke_result import AggregatedResult, GeneralError
from .errors import describe_error, error_kind, is_already_gone

logger = logging.getLogger(__name__)

RecordListener = Callable[[DeletionRecord], None]


class ResultAggregator:
    """Accumulates deletion outcomes for a run.

    Already-gone errors are classified as success. Finalize never raises on
    partial failure; deciding whether partial failure is fatal is left to the
    caller.

    Attributes:
        on_record: Optional listener notified of every record (progress, telemetry)
    """

    def __init__(
        self,
        on_record: Optional[RecordListener] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.on_record = on_record
        self._clock = clock
        self._lock = threading.Lock()
        self._records: dict[tuple[str, str, str], DeletionRecord] = {}
        self._general_errors: list[GeneralError] = []
        self._finalized: Optional[AggregatedResult] = None

    def record(
        self,
        resource_type: str,
        region: str,
        identifier: str,
        error: Optional[BaseException] = None,
    ) -> DeletionRecord:
        """Record the outcome for one identifier.

        Raises:
            RuntimeError: If the aggregator was already finalized
        """
        if error is None:
            record = DeletionRecord(
                resource_type=resource_type,
                region=region,
                identifier=identifier,
                status=DeletionStatus.SUCCEEDED,
                timestamp=self._clock(),
            )
        elif is_already_gone(error):
            record = DeletionRecord(
                resource_type=resource_type,
                region=region,
                identifier=identifier,
                status=DeletionStatus.SUCCEEDED,
                timestamp=self._clock(),
                already_gone=True,
            )
        else:
            record = DeletionRecord(
                resource_type=resource_type,
                region=region,
                identifier=identifier,
                status=DeletionStatus.FAILED,
                timestamp=self._clock(),
                error_kind=error_kind(error).value,
                error_message=describe_error(error),
                error=error,
            )

        with self._lock:
            if self._finalized is not None:
                raise RuntimeError("Cannot record outcomes after finalize()")
            key = (resource_type, region, identifier)
            if key in self._records:
                logger.warning(f"Duplicate outcome for {resource_type} {identifier} in {region}, keeping latest")
            self._records[key] = record

        if self.on_record is not None:
            self.on_record(record)
        return record

    def record_general_error(self, resource_type: str, region: str, error: BaseException) -> GeneralError:
        """Record a resource-type-scoped error such as a list failure."""
        general_error = GeneralError(
            resource_type=resource_type,
            region=region,
            description=describe_error(error),
            error_kind=error_kind(error).value,
            error=error,
        )
        with self._lock:
            if self._finalized is not None:
                raise RuntimeError("Cannot record errors after finalize()")
            self._general_errors.append(general_error)
        return general_error

    def finalize(self) -> AggregatedResult:
        """Build the immutable result (idempotent)."""
        with self._lock:
            if self._finalized is None:
                records = list(self._records.values())
                self._finalized = AggregatedResult(
                    succeeded=tuple(r for r in records if r.succeeded),
                    failed=tuple(r for r in records if not r.succeeded),
                    general_errors=tuple(self._general_errors),
                )
            return self._finalized
