"""Candidate filter evaluation.

Decides, per candidate, whether it is in scope for deletion based on the
static exclusion tag, the age window and name/tag rules.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Final, Optional, Union

from ..models.filter_config import FilterConfig
from ..models.resource import Candidate

# Resources tagged with this key and value "true" are never nuked
EXCLUSION_TAG_KEY = "cloud-nuke-excluded"
EXCLUSION_TAG_VALUE = "true"


class _Default(Enum):
    CREATED_AT = "created-at"


# Age rule falls back to the candidate's own creation time
USE_CREATED_AT: Final = _Default.CREATED_AT

ReferenceTime = Union[Optional[datetime], _Default]


def as_utc(value: datetime) -> datetime:
    """Normalize a timestamp to timezone-aware UTC (naive values are treated as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class FilterEvaluator:
    """Evaluates candidates against a FilterConfig.

    Evaluation is a pure function of (candidate, config, reference time): no
    provider calls, no side effects. The exclusion tag takes precedence over all
    other rules; the age rule and the name/tag rules are evaluated independently
    and must all pass.
    """

    def include(
        self,
        candidate: Candidate,
        config: FilterConfig,
        reference_time: ReferenceTime = USE_CREATED_AT,
    ) -> bool:
        """Check if a candidate is in scope.

        Args:
            candidate: Candidate to evaluate
            config: Filter configuration for the candidate's resource type
            reference_time: Timestamp used by the age rule; defaults to the
                candidate's own creation time

        Returns:
            True if the candidate should be deleted
        """
        return self.exclusion_reason(candidate, config, reference_time) is None

    def exclusion_reason(
        self,
        candidate: Candidate,
        config: FilterConfig,
        reference_time: ReferenceTime = USE_CREATED_AT,
    ) -> Optional[str]:
        """Explain why a candidate is out of scope.

        Returns:
            Human-readable reason, None if the candidate is in scope
        """
        if self.is_excluded_by_tag(candidate):
            return f"Tag {EXCLUSION_TAG_KEY}={EXCLUSION_TAG_VALUE}"

        when = candidate.created_at if reference_time is USE_CREATED_AT else reference_time
        age_reason = self._age_reason(when, config)
        if age_reason:
            return age_reason

        name_reason = self._name_reason(candidate.display_name, config)
        if name_reason:
            return name_reason

        return self._tag_reason(candidate.tags, config)

    def is_excluded_by_tag(self, candidate: Candidate) -> bool:
        value = candidate.tags.get(EXCLUSION_TAG_KEY)
        return value is not None and value.strip().lower() == EXCLUSION_TAG_VALUE

    def _age_reason(self, when: Optional[datetime], config: FilterConfig) -> Optional[str]:
        if when is None:
            return None

        when = as_utc(when)
        if config.exclude_after is not None and when > as_utc(config.exclude_after):
            return f"Created {when.isoformat()} after {as_utc(config.exclude_after).isoformat()}"
        if config.include_after is not None and when < as_utc(config.include_after):
            return f"Created {when.isoformat()} before {as_utc(config.include_after).isoformat()}"
        return None

    def _name_reason(self, name: str, config: FilterConfig) -> Optional[str]:
        if config.include_name_patterns:
            if not any(p.search(name) for p in config.include_name_patterns):
                return f"Name {name} matches no include pattern"
            return None

        for pattern in config.exclude_name_patterns:
            if pattern.search(name):
                return f"Name {name} matches exclude pattern {pattern.pattern}"
        return None

    def _tag_reason(self, tags: dict[str, str], config: FilterConfig) -> Optional[str]:
        for key, pattern in config.exclude_tags.items():
            value = tags.get(key)
            if value is not None and pattern.search(value):
                return f"Tag {key}={value} matches exclude rule"

        if config.include_tags:
            matched = any(
                tags.get(key) is not None and pattern.search(tags[key]) for key, pattern in config.include_tags.items()
            )
            if not matched:
                return "No tag matches include rules"

        return None
