"""Tests for FilterEvaluator.

Test coverage for age window, name rules, tag rules and the exclusion tag.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cloudnuke.models.filter_config import FilterConfig
from cloudnuke.models.resource import Candidate
from cloudnuke.nuke.filters import FilterEvaluator

CUTOFF = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def evaluator() -> FilterEvaluator:
    return FilterEvaluator()


class TestAgeRule:
    """Test suite for the age window."""

    def test_created_exactly_at_exclude_after_is_included(self, evaluator: FilterEvaluator) -> None:
        """Test boundary: created at the cutoff is in scope."""
        candidate = Candidate("r-1", created_at=CUTOFF)

        assert evaluator.include(candidate, FilterConfig(exclude_after=CUTOFF))

    def test_created_one_second_after_exclude_after_is_excluded(self, evaluator: FilterEvaluator) -> None:
        """Test boundary: created one second after the cutoff is out of scope."""
        candidate = Candidate("r-1", created_at=CUTOFF + timedelta(seconds=1))

        assert not evaluator.include(candidate, FilterConfig(exclude_after=CUTOFF))

    def test_include_after_window(self, evaluator: FilterEvaluator) -> None:
        """Test include_after is inclusive and excludes older resources."""
        config = FilterConfig(include_after=CUTOFF)

        assert evaluator.include(Candidate("r-1", created_at=CUTOFF), config)
        assert not evaluator.include(Candidate("r-2", created_at=CUTOFF - timedelta(seconds=1)), config)

    def test_no_reference_time_passes_age_rule(self, evaluator: FilterEvaluator) -> None:
        """Test candidates without any timestamp pass the age rule."""
        assert evaluator.include(Candidate("r-1"), FilterConfig(exclude_after=CUTOFF, include_after=CUTOFF))

    def test_naive_timestamps_are_treated_as_utc(self, evaluator: FilterEvaluator) -> None:
        """Test naive created_at is compared as UTC."""
        candidate = Candidate("r-1", created_at=datetime(2025, 6, 1, 12, 0, 0))

        assert evaluator.include(candidate, FilterConfig(exclude_after=CUTOFF))

    def test_explicit_reference_time_overrides_created_at(self, evaluator: FilterEvaluator) -> None:
        """Test the first-seen reference time is used instead of created_at."""
        candidate = Candidate("r-1", created_at=CUTOFF + timedelta(days=1))

        assert evaluator.include(candidate, FilterConfig(exclude_after=CUTOFF), reference_time=CUTOFF)

    def test_none_reference_time_skips_age_rule(self, evaluator: FilterEvaluator) -> None:
        """Test an explicit None reference time ignores created_at and passes the age rule."""
        candidate = Candidate("r-1", created_at=CUTOFF + timedelta(days=1))
        config = FilterConfig(exclude_after=CUTOFF)

        assert not evaluator.include(candidate, config)
        assert evaluator.include(candidate, config, reference_time=None)

    def test_empty_config_includes_everything(self, evaluator: FilterEvaluator) -> None:
        """Test an empty FilterConfig excludes nothing."""
        assert evaluator.include(Candidate("r-1", created_at=CUTOFF), FilterConfig())


class TestNameRules:
    """Test suite for name include/exclude patterns."""

    def test_include_patterns_require_a_match(self, evaluator: FilterEvaluator) -> None:
        """Test only names matching an include pattern are in scope."""
        config = FilterConfig.build(include_names=["^test-"])

        assert evaluator.include(Candidate("id-1", name="test-app"), config)
        assert not evaluator.include(Candidate("id-2", name="prod-app"), config)

    def test_exclude_patterns(self, evaluator: FilterEvaluator) -> None:
        """Test names matching an exclude pattern are out of scope."""
        config = FilterConfig.build(exclude_names=["-keep$"])

        assert not evaluator.include(Candidate("id-1", name="db-keep"), config)
        assert evaluator.include(Candidate("id-2", name="db-temp"), config)

    def test_identifier_used_when_no_name(self, evaluator: FilterEvaluator) -> None:
        """Test name rules fall back to the identifier."""
        config = FilterConfig.build(include_names=["^sg-"])

        assert evaluator.include(Candidate("sg-123"), config)

    def test_name_and_age_rules_must_both_pass(self, evaluator: FilterEvaluator) -> None:
        """Test a matching name does not rescue a too-new resource."""
        config = FilterConfig.build(exclude_after=CUTOFF, include_names=["^test-"])
        candidate = Candidate("id-1", name="test-app", created_at=CUTOFF + timedelta(hours=1))

        reason = evaluator.exclusion_reason(candidate, config)

        assert reason is not None
        assert "after" in reason

    def test_invalid_pattern_rejected_at_construction(self) -> None:
        """Test an invalid regex fails when the config is built."""
        with pytest.raises(ValueError):
            FilterConfig.build(include_names=["("])


class TestTagRules:
    """Test suite for tag rules and the exclusion tag."""

    def test_exclusion_tag_wins_over_everything(self, evaluator: FilterEvaluator) -> None:
        """Test cloud-nuke-excluded=true excludes even matching resources."""
        config = FilterConfig.build(include_names=["^test-"])
        candidate = Candidate("id-1", name="test-app", tags={"cloud-nuke-excluded": "TRUE"})

        assert evaluator.is_excluded_by_tag(candidate)
        assert not evaluator.include(candidate, config)

    def test_exclusion_tag_other_value_ignored(self, evaluator: FilterEvaluator) -> None:
        """Test only the value "true" triggers the exclusion tag."""
        candidate = Candidate("id-1", tags={"cloud-nuke-excluded": "false"})

        assert evaluator.include(candidate, FilterConfig())

    def test_exclude_tag_rule(self, evaluator: FilterEvaluator) -> None:
        """Test a matching exclude tag rule excludes."""
        config = FilterConfig.build(exclude_tags={"team": "^finance$"})

        assert not evaluator.include(Candidate("id-1", tags={"team": "finance"}), config)
        assert evaluator.include(Candidate("id-2", tags={"team": "platform"}), config)
        assert evaluator.include(Candidate("id-3"), config)

    def test_include_tag_rule(self, evaluator: FilterEvaluator) -> None:
        """Test include tag rules require at least one matching tag."""
        config = FilterConfig.build(include_tags={"env": "dev", "owner": "ci"})

        assert evaluator.include(Candidate("id-1", tags={"env": "dev"}), config)
        assert evaluator.include(Candidate("id-2", tags={"owner": "ci-bot"}), config)
        assert not evaluator.include(Candidate("id-3", tags={"env": "prod"}), config)
        assert not evaluator.include(Candidate("id-4"), config)
