"""Execution plan model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from .resource import GLOBAL_REGION

if TYPE_CHECKING:
    from ..nuke.registry import ResourceRegistry


@dataclass(frozen=True)
class Plan:
    """Validated execution plan.

    Attributes:
        regions: Target regions, possibly including the "global" pseudo-region
        resource_types: Target resource type names (sorted)
    """

    regions: tuple[str, ...]
    resource_types: tuple[str, ...]

    @property
    def includes_global(self) -> bool:
        return GLOBAL_REGION in self.regions

    def targets(self, registry: ResourceRegistry) -> Iterator[tuple[str, str]]:
        """Yield (region, resource type name) pairs.

        Global resource types are only paired with the global pseudo-region and
        regional types only with real regions.
        """
        for region in self.regions:
            for name in self.resource_types:
                is_global = registry.get(name).is_global
                if is_global == (region == GLOBAL_REGION):
                    yield region, name
