"""Tests for filter configuration and rules file loading."""

from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from cloudnuke.models.filter_config import FilterConfig, NukeRules, compile_patterns, compile_tag_patterns
from cloudnuke.models.resource import Candidate
from cloudnuke.nuke.filters import FilterEvaluator


class TestFilterConfig:
    """Test suite for FilterConfig."""

    def test_build_compiles_patterns(self) -> None:
        """Test build() compiles raw regex strings."""
        config = FilterConfig.build(include_names=["^test-"], exclude_tags={"keep": "true"})

        assert config.include_name_patterns[0].pattern == "^test-"
        assert config.exclude_tags["keep"].pattern == "true"
        assert config.has_name_rules

    def test_build_rejects_invalid_regex(self) -> None:
        """Test an invalid regex raises ValueError naming the pattern."""
        with pytest.raises(ValueError, match=r"Invalid regular expression '\[unclosed'"):
            FilterConfig.build(include_names=["[unclosed"])

    def test_precompiled_patterns_pass_through(self) -> None:
        """Test already compiled patterns are kept as-is."""
        pattern = re.compile("^prod-")
        config = FilterConfig.build(exclude_names=[pattern])

        assert config.exclude_name_patterns == (pattern,)

    def test_yaml_bool_tag_values(self) -> None:
        """Test YAML booleans become lowercase string patterns."""
        compiled = compile_tag_patterns({"enabled": True, "count": 3})

        assert compiled["enabled"].pattern == "true"
        assert compiled["count"].pattern == "3"

    def test_single_pattern_string(self) -> None:
        """Test a bare regex string is one pattern, not one per character."""
        assert [p.pattern for p in compile_patterns("^test-")] == ["^test-"]

    @pytest.mark.parametrize("patterns", [{"a": "b"}, 42, ["^ok", 7]])
    def test_compile_patterns_rejects_non_list(self, patterns) -> None:
        """Test values that are not regex lists raise ValueError."""
        with pytest.raises(ValueError, match="Expected"):
            compile_patterns(patterns)


class TestNukeRules:
    """Test suite for NukeRules."""

    def test_from_dict(self) -> None:
        """Test rules are parsed per resource type."""
        rules = NukeRules.from_dict(
            {
                "iam-role": {
                    "include": {"names_regex": ["^test-"], "tags": {"env": "dev"}},
                    "exclude": {"names_regex": ["-keep$"]},
                },
                "ec2-eip": None,
            }
        )

        assert rules.resource_types == ["ec2-eip", "iam-role"]
        role_rules = rules.rules["iam-role"]
        assert [p.pattern for p in role_rules.include_names] == ["^test-"]
        assert [p.pattern for p in role_rules.exclude_names] == ["-keep$"]
        assert role_rules.include_tags["env"].pattern == "dev"

    def test_from_dict_none(self) -> None:
        """Test an empty document yields no rules."""
        assert NukeRules.from_dict(None).rules == {}

    def test_from_dict_rejects_non_mapping(self) -> None:
        """Test a non-mapping document raises ValueError."""
        with pytest.raises(ValueError, match="mapping"):
            NukeRules.from_dict(["iam-role"])  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "document,where",
        [
            ({"iam-role": ["^test-"]}, "iam-role"),
            ({"iam-role": {"include": ["^test-"]}}, "iam-role.include"),
            ({"iam-role": {"exclude": {"tags": ["keep"]}}}, "iam-role.exclude.tags"),
        ],
    )
    def test_from_dict_rejects_non_mapping_sections(self, document, where) -> None:
        """Test malformed resource type sections raise ValueError naming the section."""
        with pytest.raises(ValueError, match=f"{where} must be a mapping"):
            NukeRules.from_dict(document)

    def test_scalar_names_regex(self) -> None:
        """Test a names_regex given as a single string still filters by the whole pattern."""
        rules = NukeRules.from_dict({"iam-role": {"include": {"names_regex": "^test-"}}})
        filters = rules.filter_for("iam-role")
        evaluator = FilterEvaluator()

        assert [p.pattern for p in filters.include_name_patterns] == ["^test-"]
        assert not evaluator.include(Candidate("prod-database-role"), filters)
        assert evaluator.include(Candidate("test-role"), filters)

    def test_filter_for_known_type(self) -> None:
        """Test filter_for merges the time window with the type's rules."""
        cutoff = datetime(2025, 1, 1, tzinfo=timezone.utc)
        rules = NukeRules.from_dict({"iam-role": {"exclude": {"tags": {"keep": ".*"}}}})

        filters = rules.filter_for("iam-role", exclude_after=cutoff)

        assert filters.exclude_after == cutoff
        assert filters.include_after is None
        assert "keep" in filters.exclude_tags

    def test_filter_for_unknown_type(self) -> None:
        """Test types without rules get only the time window."""
        filters = NukeRules().filter_for("ec2-keypairs")

        assert filters.include_name_patterns == ()
        assert filters.exclude_tags == {}
        assert not filters.has_name_rules

    def test_load(self, tmp_path) -> None:
        """Test loading rules from a YAML file."""
        path = tmp_path / "rules.yaml"
        path.write_text("iam-role:\n  exclude:\n    tags:\n      protected: true\n")

        rules = NukeRules.load(path)

        assert rules.rules["iam-role"].exclude_tags["protected"].pattern == "true"

    def test_load_invalid_yaml(self, tmp_path) -> None:
        """Test invalid YAML raises ValueError."""
        path = tmp_path / "rules.yaml"
        path.write_text("iam-role: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid rules file"):
            NukeRules.load(path)

    def test_load_missing_file(self, tmp_path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            NukeRules.load(tmp_path / "missing.yaml")
