"""Filter configuration models.

Holds the time window and name/tag rules used to decide which candidates are in
scope, plus the per-resource-type rules file loader.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml

PatternLike = Union[str, "re.Pattern[str]"]


def compile_patterns(patterns: Union[None, PatternLike, Iterable[PatternLike]]) -> tuple[re.Pattern[str], ...]:
    """Compile regex strings, passing already-compiled patterns through.

    A single string or compiled pattern is treated as a one-element list.

    Raises:
        ValueError: If a pattern is not a valid regular expression, or
            patterns is not a list of them
    """
    if patterns is None:
        return ()
    if isinstance(patterns, (str, re.Pattern)):
        patterns = [patterns]
    elif not isinstance(patterns, (list, tuple)):
        raise ValueError(f"Expected a list of regular expressions, got {type(patterns).__name__}")

    compiled = []
    for pattern in patterns:
        if not isinstance(pattern, (str, re.Pattern)):
            raise ValueError(f"Expected a regular expression string, got {pattern!r}")
        if isinstance(pattern, re.Pattern):
            compiled.append(pattern)
            continue
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ValueError(f"Invalid regular expression '{pattern}': {e}") from e
    return tuple(compiled)


def compile_tag_patterns(tags: Optional[dict[str, PatternLike]]) -> dict[str, re.Pattern[str]]:
    """Compile a tag key -> value regex mapping."""
    compiled = {}
    for key, pattern in (tags or {}).items():
        # YAML may hand back non-string scalars (e.g. `enabled: true`)
        if isinstance(pattern, bool):
            pattern = str(pattern).lower()
        elif not isinstance(pattern, re.Pattern):
            pattern = str(pattern)
        compiled[str(key)] = compile_patterns([pattern])[0]
    return compiled


@dataclass(frozen=True)
class FilterConfig:
    """Filter configuration for one resource type during one run.

    Attributes:
        exclude_after: Upper bound (inclusive); candidates newer than this are kept
        include_after: Optional lower bound (inclusive) selecting a time window
        include_name_patterns: Candidate name must match one of these when non-empty
        exclude_name_patterns: Candidate name must match none of these (used when no include patterns)
        include_tags: Tag key -> value regex; at least one must match when non-empty
        exclude_tags: Tag key -> value regex; any match excludes the candidate
    """

    exclude_after: Optional[datetime] = None
    include_after: Optional[datetime] = None
    include_name_patterns: tuple[re.Pattern[str], ...] = ()
    exclude_name_patterns: tuple[re.Pattern[str], ...] = ()
    include_tags: dict[str, re.Pattern[str]] = field(default_factory=dict)
    exclude_tags: dict[str, re.Pattern[str]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        exclude_after: Optional[datetime] = None,
        include_after: Optional[datetime] = None,
        include_names: Optional[Iterable[PatternLike]] = None,
        exclude_names: Optional[Iterable[PatternLike]] = None,
        include_tags: Optional[dict[str, PatternLike]] = None,
        exclude_tags: Optional[dict[str, PatternLike]] = None,
    ) -> FilterConfig:
        """Create a FilterConfig from raw regex strings."""
        return cls(
            exclude_after=exclude_after,
            include_after=include_after,
            include_name_patterns=compile_patterns(include_names),
            exclude_name_patterns=compile_patterns(exclude_names),
            include_tags=compile_tag_patterns(include_tags),
            exclude_tags=compile_tag_patterns(exclude_tags),
        )

    @property
    def has_name_rules(self) -> bool:
        return bool(self.include_name_patterns or self.exclude_name_patterns)


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ResourceRules:
    """Name and tag rules for a single resource type from the rules file."""

    include_names: tuple[re.Pattern[str], ...] = ()
    exclude_names: tuple[re.Pattern[str], ...] = ()
    include_tags: dict[str, re.Pattern[str]] = field(default_factory=dict)
    exclude_tags: dict[str, re.Pattern[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]], resource_type: str = "rules") -> ResourceRules:
        """Build rules from one resource type's section of the rules file.

        Raises:
            ValueError: If a section is not a mapping or a pattern is invalid
        """
        data = _mapping(data, resource_type)
        include = _mapping(data.get("include"), f"{resource_type}.include")
        exclude = _mapping(data.get("exclude"), f"{resource_type}.exclude")
        _mapping(include.get("tags"), f"{resource_type}.include.tags")
        _mapping(exclude.get("tags"), f"{resource_type}.exclude.tags")
        return cls(
            include_names=compile_patterns(include.get("names_regex")),
            exclude_names=compile_patterns(exclude.get("names_regex")),
            include_tags=compile_tag_patterns(include.get("tags")),
            exclude_tags=compile_tag_patterns(exclude.get("tags")),
        )


@dataclass(frozen=True)
class NukeRules:
    """Per-resource-type rules keyed by resource type name.

    Rules file format (YAML)::

        iam-role:
          include:
            names_regex: ["^test-"]
            tags: {env: dev}
          exclude:
            names_regex: ["-keep$"]
    """

    rules: dict[str, ResourceRules] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> NukeRules:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("Rules file must contain a mapping of resource type names to rules")
        return cls(rules={str(name): ResourceRules.from_dict(body, str(name)) for name, body in data.items()})

    @classmethod
    def load(cls, path: Union[str, Path]) -> NukeRules:
        """Load rules from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a valid rules document
        """
        with open(path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid rules file {path}: {e}") from e
        return cls.from_dict(data)

    @property
    def resource_types(self) -> list[str]:
        return sorted(self.rules)

    def filter_for(
        self,
        resource_type: str,
        exclude_after: Optional[datetime] = None,
        include_after: Optional[datetime] = None,
    ) -> FilterConfig:
        """Build the FilterConfig for one resource type."""
        rules = self.rules.get(resource_type, ResourceRules())
        return FilterConfig(
            exclude_after=exclude_after,
            include_after=include_after,
            include_name_patterns=rules.include_names,
            exclude_name_patterns=rules.exclude_names,
            include_tags=dict(rules.include_tags),
            exclude_tags=dict(rules.exclude_tags),
        )
