"""Report export helpers."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Union


def detect_format(filepath: Union[str, Path]) -> str:
    """Detect export format from a file extension.

    Raises:
        ValueError: If the extension is not .json or .csv
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix == ".csv":
        return "csv"
    raise ValueError(f"Unsupported export format '{suffix or filepath}'. Use .json or .csv")


def export_to_json(data: dict[str, Any], filepath: Union[str, Path]) -> Path:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return path


def export_to_csv(rows: list[dict[str, Any]], filepath: Union[str, Path]) -> Path:
    """Write rows to CSV; the header is the union of row keys in first-seen order."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)

    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return path
