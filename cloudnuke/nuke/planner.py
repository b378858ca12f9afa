"""Plan resolution.

Turns user-supplied region and resource type include/exclude lists into a
validated execution plan. Resolution is pure: nothing is listed or deleted here.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..models.plan import Plan
from ..models.resource import GLOBAL_REGION
from .errors import ConflictingSelectionError, InvalidRegionSelectionError, InvalidResourceTypeError
from .registry import ResourceRegistry

logger = logging.getLogger(__name__)

ALL_RESOURCE_TYPES = "all"


class PlanResolver:
    """Resolve and validate region/resource-type selections against the registry.

    Attributes:
        registry: Registered resource types
        enabled_regions: Regions enabled for the account
    """

    def __init__(self, registry: ResourceRegistry, enabled_regions: Sequence[str]) -> None:
        self.registry = registry
        self.enabled_regions = list(enabled_regions)

    def resolve(
        self,
        requested_regions: Optional[Sequence[str]] = None,
        excluded_regions: Optional[Sequence[str]] = None,
        requested_types: Optional[Sequence[str]] = None,
        excluded_types: Optional[Sequence[str]] = None,
    ) -> Plan:
        """Build an execution plan.

        Args:
            requested_regions: Regions to target (empty = all enabled regions plus global)
            excluded_regions: Regions to skip
            requested_types: Resource types to target (empty or "all" = every type)
            excluded_types: Resource types to skip

        Returns:
            Validated Plan

        Raises:
            ConflictingSelectionError: If both requested_types and excluded_types are given
            InvalidResourceTypeError: If any named resource type is unknown (all listed together)
            InvalidRegionSelectionError: If the region selection is invalid or empty
        """
        resource_types = self.resolve_resource_types(requested_types or [], excluded_types or [])
        regions = self.resolve_regions(requested_regions or [], excluded_regions or [])

        logger.debug(f"Resolved plan: {len(regions)} regions, {len(resource_types)} resource types")
        return Plan(regions=tuple(regions), resource_types=tuple(resource_types))

    def resolve_resource_types(self, requested: Sequence[str], excluded: Sequence[str]) -> list[str]:
        if requested and excluded:
            raise ConflictingSelectionError()

        self.validate_resource_types(list(requested) + list(excluded))

        if requested and ALL_RESOURCE_TYPES not in requested:
            return sorted(set(requested))

        return [name for name in self.registry.names() if name not in excluded]

    def resolve_regions(self, requested: Sequence[str], excluded: Sequence[str]) -> list[str]:
        if not self.enabled_regions:
            raise InvalidRegionSelectionError("No enabled regions available for this account")

        known = list(self.enabled_regions) + [GLOBAL_REGION]

        unknown = [r for r in list(requested) + list(excluded) if r not in known]
        if unknown:
            raise InvalidRegionSelectionError(
                f"Invalid regions specified: {', '.join(unknown)}",
                invalid_regions=unknown,
            )

        regions = [r for r in known if r not in excluded]
        if requested:
            regions = [r for r in regions if r in requested]

        if not regions:
            raise InvalidRegionSelectionError("Region selection leaves no regions to target")

        return regions

    def validate_resource_types(self, names: Sequence[str]) -> None:
        """Check every name against the registry ("all" is accepted).

        Raises:
            InvalidResourceTypeError: Listing every unknown name
        """
        invalid = []
        for name in names:
            if name == ALL_RESOURCE_TYPES or name in self.registry:
                continue
            if name not in invalid:
                invalid.append(name)

        if invalid:
            raise InvalidResourceTypeError(invalid)
