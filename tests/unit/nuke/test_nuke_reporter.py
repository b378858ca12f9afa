"""Tests for NukeReporter."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from cloudnuke.models.deletion_record import DeletionRecord, DeletionStatus
from cloudnuke.models.inventory import DiscoveredResources, Inventory
from cloudnuke.models.nuke_result import AggregatedResult, GeneralError
from cloudnuke.models.resource import Candidate
from cloudnuke.nuke.reporter import NukeReporter

TIMESTAMP = datetime(2025, 11, 11, 15, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def console() -> Console:
    return Console(file=StringIO(), width=200, no_color=True)


@pytest.fixture
def result() -> AggregatedResult:
    return AggregatedResult(
        succeeded=(
            DeletionRecord("iam-role", "global", "role-a", DeletionStatus.SUCCEEDED, TIMESTAMP),
            DeletionRecord("iam-role", "global", "role-b", DeletionStatus.SUCCEEDED, TIMESTAMP, already_gone=True),
        ),
        failed=(
            DeletionRecord(
                "ec2-keypairs",
                "us-east-1",
                "key-1",
                DeletionStatus.FAILED,
                TIMESTAMP,
                error_kind="DeleteError",
                error_message="error:INSUFFICIENT_PERMISSION",
            ),
        ),
        general_errors=(GeneralError("ecs-service", "us-west-2", "ecs-service: failed to list", "ListError"),),
    )


class TestNukeReporter:
    """Test suite for report rendering and export."""

    def test_display_result(self, console: Console, result: AggregatedResult) -> None:
        """Test the result report shows summary, failures and general errors."""
        NukeReporter(console).display_result(result)
        output = console.file.getvalue()

        assert "Nuke Report" in output
        assert "key-1" in output
        assert "error:INSUFFICIENT_PERMISSION" in output
        assert "failed to list" in output

    def test_display_inventory(self, console: Console) -> None:
        """Test found, tagged and skipped resources are listed."""
        inventory = Inventory(
            entries=[
                DiscoveredResources(
                    region="us-east-1",
                    resource_type="ec2-eip",
                    candidates=[Candidate("eipalloc-1", name="web-ip")],
                    tagged=[Candidate("eipalloc-2")],
                    excluded=[(Candidate("eipalloc-3"), "Tag cloud-nuke-excluded=true")],
                )
            ]
        )

        NukeReporter(console).display_inventory(inventory, show_excluded=True)
        output = console.file.getvalue()

        assert "eipalloc-1" in output
        assert "web-ip" in output
        assert "1 resource(s) seen for the first time" in output
        assert "eipalloc-3" in output

    def test_display_empty_inventory(self, console: Console) -> None:
        """Test an empty inventory prints a friendly message."""
        NukeReporter(console).display_inventory(Inventory())

        assert "No resources found" in console.file.getvalue()

    def test_to_dict_shape(self, console: Console, result: AggregatedResult) -> None:
        """Test the JSON report structure."""
        data = NukeReporter(console).to_dict(result, regions=["us-east-1", "global"])

        assert data["command"] == "nuke"
        assert data["regions"] == ["us-east-1", "global"]
        assert {r["outcome"] for r in data["resources"]} == {"deleted", "already-gone", "failed"}
        assert data["general_errors"][0]["error_kind"] == "ListError"
        assert data["summary"] == {"total": 3, "deleted": 2, "failed": 1, "general_errors": 1}

    def test_export_json(self, console: Console, result: AggregatedResult, tmp_path: Path) -> None:
        """Test JSON export writes a readable file."""
        filepath = tmp_path / "report.json"

        written = NukeReporter(console).export_json(result, str(filepath))

        assert written == filepath
        data = json.loads(written.read_text())
        assert len(data["resources"]) == 3

    def test_export_csv(self, console: Console, result: AggregatedResult, tmp_path: Path) -> None:
        """Test CSV export writes one row per identifier."""
        filepath = tmp_path / "out" / "report.csv"

        written = NukeReporter(console).export_csv(result, str(filepath))

        assert written == filepath
        with open(written, newline="") as f:
            rows = list(csv.DictReader(f))
        assert [row["identifier"] for row in rows] == ["role-a", "role-b", "key-1"]
        assert rows[2]["error_kind"] == "DeleteError"
