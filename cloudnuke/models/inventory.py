"""Discovery result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .resource import Candidate


@dataclass
class DiscoveredResources:
    """Discovery result for one (region, resource type) target.

    Attributes:
        region: Region or "global"
        resource_type: Resource type name
        candidates: In-scope candidates that will be deleted
        tagged: Candidates tagged with a first-seen tag on this pass (never deleted this pass)
        excluded: Out-of-scope candidates with the reason they were skipped
    """

    region: str
    resource_type: str
    candidates: list[Candidate] = field(default_factory=list)
    tagged: list[Candidate] = field(default_factory=list)
    excluded: list[tuple[Candidate, str]] = field(default_factory=list)

    @property
    def identifiers(self) -> list[str]:
        return [c.identifier for c in self.candidates]


@dataclass
class Inventory:
    """Everything discovered for a plan, plus resource-type-scoped list errors."""

    entries: list[DiscoveredResources] = field(default_factory=list)
    errors: list[tuple[str, str, BaseException]] = field(default_factory=list)

    def __iter__(self) -> Iterator[DiscoveredResources]:
        return iter(self.entries)

    @property
    def total_candidates(self) -> int:
        return sum(len(e.candidates) for e in self.entries)

    @property
    def total_tagged(self) -> int:
        return sum(len(e.tagged) for e in self.entries)

    @property
    def has_candidates(self) -> bool:
        return self.total_candidates > 0

    def regions(self) -> list[str]:
        seen: list[str] = []
        for entry in self.entries:
            if entry.region not in seen:
                seen.append(entry.region)
        return seen

    def for_region(self, region: str) -> list[DiscoveredResources]:
        return [e for e in self.entries if e.region == region]
