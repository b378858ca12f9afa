"""Tests for discovery inventory models."""

from __future__ import annotations

from cloudnuke.models.inventory import DiscoveredResources, Inventory
from cloudnuke.models.resource import Candidate


class TestInventory:
    """Test suite for Inventory."""

    def test_empty_inventory(self) -> None:
        """Test an empty inventory has no candidates or regions."""
        inventory = Inventory()

        assert inventory.total_candidates == 0
        assert not inventory.has_candidates
        assert inventory.regions() == []

    def test_totals_and_regions(self) -> None:
        """Test totals and region ordering across entries."""
        inventory = Inventory(
            entries=[
                DiscoveredResources(
                    region="us-west-2",
                    resource_type="ec2-eip",
                    candidates=[Candidate("eipalloc-1"), Candidate("eipalloc-2")],
                ),
                DiscoveredResources(
                    region="global",
                    resource_type="iam-role",
                    tagged=[Candidate("role-a")],
                ),
                DiscoveredResources(
                    region="us-west-2",
                    resource_type="ec2-keypairs",
                    candidates=[Candidate("key-1")],
                    excluded=[(Candidate("key-2"), "name excluded")],
                ),
            ]
        )

        assert inventory.total_candidates == 3
        assert inventory.total_tagged == 1
        assert inventory.has_candidates
        assert inventory.regions() == ["us-west-2", "global"]
        assert [e.resource_type for e in inventory.for_region("us-west-2")] == ["ec2-eip", "ec2-keypairs"]
        assert inventory.entries[0].identifiers == ["eipalloc-1", "eipalloc-2"]
        assert len(list(inventory)) == 3
