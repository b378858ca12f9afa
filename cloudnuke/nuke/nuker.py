"""Resource nuker for account cleanup.

Main orchestrator for nuke runs with discovery (dry-run) and execution modes.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Callable, Optional

from ..models.deletion_operation import DeletionOperation, OperationMode, OperationStatus
from ..models.filter_config import FilterConfig, NukeRules
from ..models.inventory import DiscoveredResources, Inventory
from ..models.nuke_result import AggregatedResult
from ..models.plan import Plan
from ..models.resource import Candidate, ResourceType
from .aggregator import RecordListener, ResultAggregator
from .batching import BatchController
from .errors import DeleteError, ListError, TooManyResourcesError, is_already_gone
from .filters import FilterEvaluator
from .first_seen import NEEDS_TAGGING, FirstSeenTracker, TagStore
from .poller import ConfirmationPoller
from .registry import ResourceRegistry
from .teardown import TeardownExecutor

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class NukeRun:
    """Outcome of ResourceNuker.run()."""

    operation: DeletionOperation
    result: AggregatedResult
    inventory: Inventory


class ResourceNuker:
    """Resource nuker orchestrator.

    Coordinates discovery, filtering, first-seen tagging, batched deletion with
    teardown and confirmation, and result aggregation. Supports both dry-run and
    execution modes.

    Attributes:
        registry: Registered resource types
        controller: Batching and concurrency controller
        tracker: First-seen tag tracker
        poller: Confirmation poller for asynchronous deletes
        evaluator: Candidate filter evaluator
        teardown: Teardown protocol executor
        parallel_regions: Number of regions nuked concurrently
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        controller: Optional[BatchController] = None,
        tracker: Optional[FirstSeenTracker] = None,
        poller: Optional[ConfirmationPoller] = None,
        evaluator: Optional[FilterEvaluator] = None,
        teardown: Optional[TeardownExecutor] = None,
        parallel_regions: int = 1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.registry = registry
        self.controller = controller or BatchController()
        self.tracker = tracker or FirstSeenTracker()
        self.poller = poller or ConfirmationPoller()
        self.evaluator = evaluator or FilterEvaluator()
        self.teardown = teardown or TeardownExecutor()
        self.parallel_regions = max(1, parallel_regions)
        self._clock = clock

    def discover(
        self,
        plan: Plan,
        rules: Optional[NukeRules] = None,
        exclude_after: Optional[datetime] = None,
        include_after: Optional[datetime] = None,
    ) -> Inventory:
        """Find in-scope resources for every (region, resource type) in the plan.

        List failures are collected on the inventory and never stop other
        resource types.

        Args:
            plan: Validated execution plan
            rules: Per-resource-type name/tag rules (optional)
            exclude_after: Only resources created at or before this time are in scope
            include_after: Only resources created at or after this time are in scope

        Returns:
            Inventory of in-scope, tagged and excluded candidates
        """
        rules = rules or NukeRules()
        inventory = Inventory()
        now = self._clock()

        for region, name in plan.targets(self.registry):
            resource_type = self.registry.get(name)
            filters = rules.filter_for(name, exclude_after=exclude_after, include_after=include_after)

            try:
                discovered = self._discover_resource_type(resource_type, region, filters, now)
            except ListError as e:
                logger.error(str(e))
                inventory.errors.append((name, region, e))
                continue

            if discovered.candidates:
                logger.info(f"Found {len(discovered.candidates)} {name} resources in {region}")
            if discovered.tagged:
                logger.info(f"Tagged {len(discovered.tagged)} {name} resources in {region} as first seen")
            inventory.entries.append(discovered)

        logger.info("Done searching for resources")
        return inventory

    def nuke(self, inventory: Inventory, on_record: Optional[RecordListener] = None) -> AggregatedResult:
        """Delete every in-scope candidate in the inventory.

        Args:
            inventory: Discovery result
            on_record: Optional listener notified of every outcome

        Returns:
            AggregatedResult with every identifier in exactly one of succeeded/failed
        """
        aggregator = ResultAggregator(on_record=on_record, clock=self._clock)
        for resource_type, region, error in inventory.errors:
            aggregator.record_general_error(resource_type, region, error)

        regions = inventory.regions()
        if self.parallel_regions > 1 and len(regions) > 1:
            with ThreadPoolExecutor(max_workers=min(self.parallel_regions, len(regions))) as executor:
                futures = [executor.submit(self._nuke_region, inventory, region, aggregator) for region in regions]
            for future in futures:
                future.result()
        else:
            for region in regions:
                self._nuke_region(inventory, region, aggregator)

        return aggregator.finalize()

    def run(
        self,
        plan: Plan,
        rules: Optional[NukeRules] = None,
        exclude_after: Optional[datetime] = None,
        include_after: Optional[datetime] = None,
        dry_run: bool = False,
        aws_profile: Optional[str] = None,
        on_record: Optional[RecordListener] = None,
    ) -> NukeRun:
        """Discover and (unless dry_run) nuke resources for a plan.

        Returns:
            NukeRun with the operation summary, aggregated result and inventory
        """
        started_at = self._clock()

        inventory = self.discover(plan, rules, exclude_after=exclude_after, include_after=include_after)
        if dry_run:
            result = self.discovery_result(inventory)
        else:
            result = self.nuke(inventory, on_record=on_record)

        operation = self.build_operation(plan, inventory, result, started_at, dry_run=dry_run, aws_profile=aws_profile)
        return NukeRun(operation=operation, result=result, inventory=inventory)

    def discovery_result(self, inventory: Inventory) -> AggregatedResult:
        """Result of a run that deletes nothing: list errors only."""
        aggregator = ResultAggregator(clock=self._clock)
        for resource_type, region, error in inventory.errors:
            aggregator.record_general_error(resource_type, region, error)
        return aggregator.finalize()

    def build_operation(
        self,
        plan: Plan,
        inventory: Inventory,
        result: AggregatedResult,
        started_at: datetime,
        dry_run: bool = False,
        aws_profile: Optional[str] = None,
    ) -> DeletionOperation:
        """Summarize a run as a DeletionOperation for reporting and auditing."""
        if dry_run:
            mode = OperationMode.DRY_RUN
            status = OperationStatus.PLANNED
        else:
            mode = OperationMode.EXECUTE
            status = self._final_status(result)

        return DeletionOperation(
            operation_id=f"op_{uuid.uuid4()}",
            timestamp=started_at,
            mode=mode,
            status=status,
            total_resources=inventory.total_candidates,
            succeeded_count=len(result.succeeded),
            failed_count=len(result.failed),
            tagged_count=inventory.total_tagged,
            general_error_count=len(result.general_errors),
            aws_profile=aws_profile,
            regions=list(plan.regions),
            resource_types=list(plan.resource_types),
            started_at=started_at,
            completed_at=self._clock(),
        )

    def _discover_resource_type(
        self,
        resource_type: ResourceType,
        region: str,
        filters: FilterConfig,
        now: datetime,
    ) -> DiscoveredResources:
        try:
            listed = resource_type.list(region, filters)
        except Exception as e:
            raise ListError(resource_type.name, region, e) from e

        discovered = DiscoveredResources(region=region, resource_type=resource_type.name)
        store = resource_type.first_seen_store()
        seen: set[str] = set()

        for candidate in listed:
            if candidate.identifier in seen:
                continue
            seen.add(candidate.identifier)

            if store is None:
                reason = self.evaluator.exclusion_reason(candidate, filters)
            else:
                reason = self._first_seen_exclusion_reason(
                    resource_type, store, region, candidate, filters, now, discovered
                )
                if candidate in discovered.tagged:
                    continue

            if reason is None:
                discovered.candidates.append(candidate)
            else:
                logger.debug(f"Skipping {resource_type.name} {candidate.identifier}: {reason}")
                discovered.excluded.append((candidate, reason))

        return discovered

    def _first_seen_exclusion_reason(
        self,
        resource_type: ResourceType,
        store: TagStore,
        region: str,
        candidate: Candidate,
        filters: FilterConfig,
        now: datetime,
        discovered: DiscoveredResources,
    ) -> Optional[str]:
        # Name, tag and exclusion-tag rules first so protected resources are never tagged
        reason = self.evaluator.exclusion_reason(candidate, filters, reference_time=None)
        if reason is not None:
            return reason

        try:
            reference_time = self.tracker.reference_time(candidate)
        except ValueError as e:
            return f"Unparseable first-seen tag: {e}"

        if reference_time is NEEDS_TAGGING:
            try:
                self.tracker.tag(store, region, candidate, now)
            except Exception as e:
                logger.error(f"Failed to tag {resource_type.name} {candidate.identifier} as first seen: {e}")
                return f"Failed to write first-seen tag: {e}"
            discovered.tagged.append(candidate)
            return None

        return self.evaluator.exclusion_reason(candidate, filters, reference_time=reference_time)

    def _nuke_region(self, inventory: Inventory, region: str, aggregator: ResultAggregator) -> None:
        for discovered in inventory.for_region(region):
            if discovered.candidates:
                self._nuke_resource_type(self.registry.get(discovered.resource_type), discovered, aggregator)

    def _nuke_resource_type(
        self,
        resource_type: ResourceType,
        discovered: DiscoveredResources,
        aggregator: ResultAggregator,
    ) -> None:
        region = discovered.region
        identifiers = discovered.identifiers
        logger.info(f"Nuking {len(identifiers)} {resource_type.name} in {region}")

        try:
            outcomes = self.controller.run_batched(
                resource_type.name,
                identifiers,
                resource_type.max_batch_size,
                partial(self._nuke_identifier, resource_type, region),
            )
        except TooManyResourcesError as e:
            for identifier in identifiers:
                aggregator.record(resource_type.name, region, identifier, e)
            return

        for outcome in outcomes:
            aggregator.record(resource_type.name, region, outcome.identifier, outcome.error)

    def _nuke_identifier(self, resource_type: ResourceType, region: str, identifier: str) -> None:
        """Teardown, delete and confirm a single identifier.

        Raises:
            TeardownStepError: If a prerequisite step failed (delete not attempted)
            DeleteError: If the provider rejected the delete call
            ConfirmationTimeoutError: If the resource was not observed gone in time
            ConfirmationFailedError: If the resource entered a terminal failure state
        """
        self.teardown.run(resource_type, region, identifier)

        try:
            resource_type.delete(region, identifier)
        except Exception as e:
            if is_already_gone(e):
                raise
            raise DeleteError(resource_type.name, e) from e

        probe = resource_type.confirm_probe()
        if probe is not None:
            self.poller.wait_until_gone(region, identifier, probe, resource_type=resource_type.name)

    def _final_status(self, result: AggregatedResult) -> OperationStatus:
        failures = len(result.failed) + len(result.general_errors)
        if failures > 0:
            if result.succeeded:
                return OperationStatus.PARTIAL
            return OperationStatus.FAILED
        return OperationStatus.COMPLETED
