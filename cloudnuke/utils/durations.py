"""Duration parsing for age filters such as --older-than 24h."""

from __future__ import annotations

import re
from datetime import timedelta

_UNITS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}

_PART = re.compile(r"(\d+)([smhdw])")


def parse_duration(value: str) -> timedelta:
    """Parse a duration like "30m", "24h", "7d" or "1d12h".

    Raises:
        ValueError: If the value is empty or contains anything but <number><unit> parts
    """
    text = value.strip().lower() if value else ""
    if not text:
        raise ValueError("Duration cannot be empty")

    seconds = 0
    position = 0
    for match in _PART.finditer(text):
        if match.start() != position:
            break
        seconds += int(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ValueError(f"Invalid duration '{value}'. Use <number><unit> with units s, m, h, d, w (e.g. 24h, 1d12h)")

    return timedelta(seconds=seconds)
