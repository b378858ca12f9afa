"""Tests for PlanResolver.

Test coverage for region and resource type selection.
"""

from __future__ import annotations

import pytest

from cloudnuke.nuke.errors import ConflictingSelectionError, InvalidRegionSelectionError, InvalidResourceTypeError
from cloudnuke.nuke.planner import PlanResolver
from cloudnuke.nuke.registry import ResourceRegistry
from tests.fixtures.resources import FakeResourceType


@pytest.fixture
def registry() -> ResourceRegistry:
    """Registry with two regional types and one global type."""
    return ResourceRegistry(
        [
            FakeResourceType("ec2-keypairs"),
            FakeResourceType("ecs-service"),
            FakeResourceType("iam-role", is_global=True),
        ]
    )


@pytest.fixture
def resolver(registry: ResourceRegistry) -> PlanResolver:
    return PlanResolver(registry, ["us-east-1", "us-west-2", "eu-west-1"])


class TestResolveResourceTypes:
    """Test suite for resource type selection."""

    def test_empty_selection_means_all(self, resolver: PlanResolver) -> None:
        """Test no selection yields every registered type."""
        plan = resolver.resolve()

        assert plan.resource_types == ("ec2-keypairs", "ecs-service", "iam-role")

    def test_all_keyword_means_all(self, resolver: PlanResolver) -> None:
        """Test "all" yields every registered type."""
        plan = resolver.resolve(requested_types=["all"])

        assert plan.resource_types == ("ec2-keypairs", "ecs-service", "iam-role")

    def test_requested_types_are_deduplicated_and_sorted(self, resolver: PlanResolver) -> None:
        """Test include list is used as the selection."""
        plan = resolver.resolve(requested_types=["iam-role", "ec2-keypairs", "iam-role"])

        assert plan.resource_types == ("ec2-keypairs", "iam-role")

    def test_excluded_types_are_removed(self, resolver: PlanResolver) -> None:
        """Test exclude list removes types from the full registry."""
        plan = resolver.resolve(excluded_types=["ecs-service"])

        assert plan.resource_types == ("ec2-keypairs", "iam-role")

    def test_include_and_exclude_conflict(self, resolver: PlanResolver) -> None:
        """Test providing both include and exclude lists is rejected."""
        with pytest.raises(ConflictingSelectionError):
            resolver.resolve(requested_types=["iam-role"], excluded_types=["ecs-service"])

    def test_unknown_types_are_reported_together(self, resolver: PlanResolver) -> None:
        """Test every invalid name is listed in one error."""
        with pytest.raises(InvalidResourceTypeError) as exc_info:
            resolver.resolve(requested_types=["iam-role", "bogus", "nope"])

        assert exc_info.value.invalid_types == ["bogus", "nope"]
        assert "bogus" in str(exc_info.value)
        assert "nope" in str(exc_info.value)

    def test_unknown_excluded_type_is_rejected(self, resolver: PlanResolver) -> None:
        """Test exclude names are validated too."""
        with pytest.raises(InvalidResourceTypeError):
            resolver.resolve(excluded_types=["bogus"])

    def test_validate_resource_types_accepts_known_names(self, resolver: PlanResolver) -> None:
        """Test rules-file names can be validated on their own."""
        resolver.validate_resource_types(["iam-role", "all"])


class TestResolveRegions:
    """Test suite for region selection."""

    def test_default_is_enabled_regions_plus_global(self, resolver: PlanResolver) -> None:
        """Test no region selection targets every enabled region and global."""
        plan = resolver.resolve()

        assert plan.regions == ("us-east-1", "us-west-2", "eu-west-1", "global")
        assert plan.includes_global

    def test_requested_regions(self, resolver: PlanResolver) -> None:
        """Test include list narrows the regions."""
        plan = resolver.resolve(requested_regions=["us-west-2"])

        assert plan.regions == ("us-west-2",)
        assert not plan.includes_global

    def test_excluded_regions(self, resolver: PlanResolver) -> None:
        """Test exclude list removes regions."""
        plan = resolver.resolve(excluded_regions=["global", "eu-west-1"])

        assert plan.regions == ("us-east-1", "us-west-2")

    def test_unknown_region_is_rejected(self, resolver: PlanResolver) -> None:
        """Test a region outside the enabled set is rejected with all offenders listed."""
        with pytest.raises(InvalidRegionSelectionError) as exc_info:
            resolver.resolve(requested_regions=["us-east-1", "mars-1"], excluded_regions=["venus-2"])

        assert exc_info.value.invalid_regions == ["mars-1", "venus-2"]

    def test_empty_resolution_is_rejected(self, resolver: PlanResolver) -> None:
        """Test excluding every requested region is an error."""
        with pytest.raises(InvalidRegionSelectionError):
            resolver.resolve(requested_regions=["us-east-1"], excluded_regions=["us-east-1"])

    def test_no_enabled_regions(self, registry: ResourceRegistry) -> None:
        """Test an account with no enabled regions cannot be planned."""
        with pytest.raises(InvalidRegionSelectionError):
            PlanResolver(registry, []).resolve()


class TestPlanTargets:
    """Test suite for Plan.targets pairing."""

    def test_global_types_only_run_in_global(self, resolver: PlanResolver, registry: ResourceRegistry) -> None:
        """Test global types pair with the global pseudo-region and regional types never do."""
        plan = resolver.resolve(requested_regions=["us-east-1", "global"])

        targets = list(plan.targets(registry))

        assert ("global", "iam-role") in targets
        assert ("us-east-1", "ec2-keypairs") in targets
        assert ("us-east-1", "iam-role") not in targets
        assert ("global", "ec2-keypairs") not in targets
