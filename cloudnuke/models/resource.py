"""Resource contract shared by the nuke engine and every resource type.

A resource type supplies the engine with typed list/delete functions plus the
optional pre-delete teardown steps, asynchronous-deletion probe and first-seen
tag store. The engine never talks to a provider API directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .filter_config import FilterConfig
    from ..nuke.first_seen import TagStore

# Maximum number of identifiers per batch when a type does not declare its own
DEFAULT_BATCH_SIZE = 10

# Pseudo-region for account-level resources (IAM, Route53, ...)
GLOBAL_REGION = "global"


class ProbeStatus(Enum):
    """Observed state of a resource after an asynchronous delete call."""

    GONE = "gone"
    PENDING = "pending"
    FAILED = "failed"


@dataclass(frozen=True)
class Candidate:
    """A resource discovered by a resource type's list call.

    Attributes:
        identifier: Opaque provider identifier (ID, name or ARN) used for deletion
        name: Human-readable name used by name filters (defaults to identifier)
        created_at: Creation or last-modified time, when the provider exposes one
        tags: Provider tags at listing time
    """

    identifier: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.identifier


@dataclass(frozen=True)
class TeardownStep:
    """One ordered prerequisite (detach, drain, disassociate) before deletion."""

    name: str
    action: Callable[[str, str], None]

    def __call__(self, region: str, identifier: str) -> None:
        self.action(region, identifier)


ProbeFunc = Callable[[str, str], ProbeStatus]


class ResourceType(ABC):
    """Abstract base class for all nukeable resource types.

    Each resource type should:
    1. Have a unique name (e.g., "iam-role")
    2. Declare the largest batch its delete path can safely handle
    3. Implement list() and delete() against its provider API
    4. Optionally declare teardown steps, a confirmation probe and a first-seen tag store

    Instances are registered once and are never mutated by the engine.
    """

    # None means no cap of its own; the safety ceiling still applies
    max_batch_size: Optional[int] = DEFAULT_BATCH_SIZE
    is_global: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique resource type name.

        Returns:
            String identifier (e.g., "ec2-keypairs")
        """

    @abstractmethod
    def list(self, region: str, filters: FilterConfig) -> list[Candidate]:
        """List candidate resources in a region.

        Args:
            region: Region to list (GLOBAL_REGION for account-level types)
            filters: Filter configuration for this resource type

        Returns:
            List of candidates; filtering is applied by the engine afterwards
        """

    @abstractmethod
    def delete(self, region: str, identifier: str) -> None:
        """Issue the final delete call for one identifier.

        Raises:
            Exception: Provider error when the delete call is rejected
        """

    def teardown_steps(self) -> list[TeardownStep]:
        """Ordered pre-delete steps (empty when no teardown is required)."""
        return []

    def confirm_probe(self) -> Optional[ProbeFunc]:
        """Probe used to confirm asynchronous deletion (None = synchronous)."""
        return None

    def first_seen_store(self) -> Optional[TagStore]:
        """Tag store for types whose provider API exposes no creation time."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
