"""First-seen tracking for resource types without a creation timestamp.

Resources whose provider API exposes no creation time are tagged with the time
they were first observed. A resource is never deleted on the pass that tags it;
on later passes the tag value becomes its reference time for the age rule.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Final, Protocol, Union

from ..models.resource import Candidate

logger = logging.getLogger(__name__)

FIRST_SEEN_TAG_KEY = "cloud-nuke-first-seen"

_RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_LEGACY_FORMAT = "%Y-%m-%d %H:%M:%S"


class _NeedsTagging(Enum):
    """Sentinel returned when a candidate has no first-seen tag yet."""

    NEEDS_TAGGING = "needs-tagging"

    def __repr__(self) -> str:
        return "NEEDS_TAGGING"


NEEDS_TAGGING: Final = _NeedsTagging.NEEDS_TAGGING


class TagStore(Protocol):
    """Persistent key/value store backed by provider-native resource tags."""

    def write(self, region: str, identifier: str, key: str, value: str) -> None: ...


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as an RFC3339 UTC string."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(_RFC3339_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a first-seen tag value.

    Accepts RFC3339 and the legacy "YYYY-MM-DD HH:MM:SS" format.

    Raises:
        ValueError: If the value matches neither format
    """
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Timestamp {value!r} is not RFC3339, trying legacy format")
        parsed = datetime.strptime(text, _LEGACY_FORMAT)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FirstSeenTracker:
    """Reads and writes first-seen tags."""

    def __init__(self, tag_key: str = FIRST_SEEN_TAG_KEY) -> None:
        self.tag_key = tag_key

    def reference_time(self, candidate: Candidate) -> Union[datetime, _NeedsTagging]:
        """Return the first-seen time of a candidate, or NEEDS_TAGGING.

        Raises:
            ValueError: If the existing tag value cannot be parsed
        """
        value = candidate.tags.get(self.tag_key)
        if value is None:
            return NEEDS_TAGGING
        return parse_timestamp(value)

    def tag(self, store: TagStore, region: str, candidate: Candidate, now: datetime) -> bool:
        """Write the first-seen tag unless the candidate already carries one.

        Returns:
            True if a tag was written
        """
        if self.tag_key in candidate.tags:
            logger.debug(f"{candidate.identifier} already has a first-seen tag, leaving it unchanged")
            return False

        store.write(region, candidate.identifier, self.tag_key, format_timestamp(now))
        logger.debug(f"Tagged {candidate.identifier} in {region} as first seen at {format_timestamp(now)}")
        return True
