"""Registry of nukeable resource types."""

from __future__ import annotations

from typing import Iterable, Iterator

from ..models.resource import ResourceType


class ResourceRegistry:
    """Immutable name -> ResourceType mapping built once at engine start."""

    def __init__(self, resource_types: Iterable[ResourceType]) -> None:
        types: dict[str, ResourceType] = {}
        for resource_type in resource_types:
            if resource_type.name in types:
                raise ValueError(f"Duplicate resource type registered: {resource_type.name}")
            if resource_type.max_batch_size is not None and resource_type.max_batch_size < 1:
                raise ValueError(f"{resource_type.name}: max_batch_size must be positive")
            types[resource_type.name] = resource_type
        self._types = types

    def names(self) -> list[str]:
        return sorted(self._types)

    def get(self, name: str) -> ResourceType:
        """Get a resource type by name.

        Raises:
            KeyError: If no resource type with this name is registered
        """
        return self._types[name]

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[ResourceType]:
        return iter(self._types[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._types)
