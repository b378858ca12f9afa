"""Nuke report formatting and display."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.inventory import Inventory
from ..models.nuke_result import AggregatedResult
from ..utils.export import export_to_csv, export_to_json


class NukeReporter:
    """Format and display discovery inventories and nuke results."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize nuke reporter.

        Args:
            console: Rich console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def display_inventory(self, inventory: Inventory, show_excluded: bool = False) -> None:
        """Display resources found by discovery.

        Args:
            inventory: Discovery result
            show_excluded: Whether to list out-of-scope resources with the reason
        """
        self.console.print()
        if not inventory.has_candidates:
            self.console.print("[green]✓ No resources found to nuke[/green]", style="bold")
        else:
            table = Table(title="Resources To Nuke", show_header=True, header_style="bold magenta")
            table.add_column("Resource Type", style="cyan")
            table.add_column("Region", width=15)
            table.add_column("Identifier", style="white")
            table.add_column("Name", style="dim")

            for entry in inventory:
                for candidate in entry.candidates:
                    name = candidate.name if candidate.name and candidate.name != candidate.identifier else "-"
                    table.add_row(entry.resource_type, entry.region, candidate.identifier, name)

            self.console.print(table)
            self.console.print(f"\nTotal: [bold]{inventory.total_candidates}[/bold] resource(s)")

        if inventory.total_tagged:
            self.console.print(
                f"[yellow]⚠️  {inventory.total_tagged} resource(s) seen for the first time were tagged "
                "and will be considered on a later run[/yellow]"
            )

        if show_excluded:
            self._display_excluded(inventory)

        if inventory.errors:
            self.console.print()
            for resource_type, region, error in inventory.errors:
                self.console.print(f"[red]✗ {resource_type} ({region}): {error}[/red]")

    def display_result(self, result: AggregatedResult) -> None:
        """Display the aggregated nuke result.

        Args:
            result: AggregatedResult to display
        """
        self.console.print()
        status = "[red]Completed with failures[/red]" if result.has_failures else "[green]Completed[/green]"
        self.console.print(
            Panel(
                f"[bold]Nuke Report[/bold]\n"
                f"Status: {status}\n"
                f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}",
                style="cyan",
            )
        )
        self.console.print()

        self._display_summary(result)

        if result.failed:
            self._display_failures(result)

        if result.general_errors:
            table = Table(title="General Errors", show_header=True, header_style="bold red")
            table.add_column("Resource Type", style="cyan")
            table.add_column("Region", width=15)
            table.add_column("Error", style="red")
            for general_error in result.general_errors:
                table.add_row(general_error.resource_type, general_error.region, general_error.description)
            self.console.print(table)
            self.console.print()

    def _display_summary(self, result: AggregatedResult) -> None:
        """Display per-resource-type counts."""
        table = Table(title="Summary", show_header=True, header_style="bold magenta")
        table.add_column("Resource Type", style="cyan")
        table.add_column("Deleted", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")

        for resource_type, counts in sorted(result.by_resource_type().items()):
            table.add_row(resource_type, str(counts["succeeded"]), str(counts["failed"]))

        table.add_row("━" * 15, "━" * 7, "━" * 6, style="dim")
        table.add_row("[bold]Total", f"[bold]{len(result.succeeded)}", f"[bold]{len(result.failed)}")

        self.console.print(table)
        self.console.print()

    def _display_failures(self, result: AggregatedResult) -> None:
        table = Table(title="Failures", show_header=True, header_style="bold red")
        table.add_column("Resource Type", style="cyan")
        table.add_column("Region", width=15)
        table.add_column("Identifier", style="white")
        table.add_column("Error", style="red")

        for record in result.failed:
            table.add_row(record.resource_type, record.region, record.identifier, record.error_message or "-")

        self.console.print(table)
        self.console.print()

    def _display_excluded(self, inventory: Inventory) -> None:
        rows = [(entry, candidate, reason) for entry in inventory for candidate, reason in entry.excluded]
        if not rows:
            return

        table = Table(title="Skipped", show_header=True, box=None, padding=(0, 2))
        table.add_column("Resource Type", style="cyan")
        table.add_column("Region", width=15)
        table.add_column("Identifier")
        table.add_column("Reason", style="dim")
        for entry, candidate, reason in rows:
            table.add_row(entry.resource_type, entry.region, candidate.identifier, reason)

        self.console.print()
        self.console.print(table)

    def to_dict(
        self,
        result: AggregatedResult,
        command: str = "nuke",
        regions: Optional[Sequence[str]] = None,
    ) -> dict[str, Any]:
        """Build the JSON report structure.

        Args:
            result: AggregatedResult to serialize
            command: Command that produced the result
            regions: Regions targeted by the run

        Returns:
            Dictionary with timestamp, command, regions, resources, general_errors and summary
        """
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "command": command,
            "regions": list(regions or []),
            "resources": [
                {
                    "resource_type": record.resource_type,
                    "region": record.region,
                    "identifier": record.identifier,
                    "outcome": record.outcome,
                    "error": record.error_message,
                }
                for record in result.records
            ],
            "general_errors": [general_error.to_dict() for general_error in result.general_errors],
            "summary": {
                "total": result.total,
                "deleted": len(result.succeeded),
                "failed": len(result.failed),
                "general_errors": len(result.general_errors),
            },
        }

    def export_json(
        self,
        result: AggregatedResult,
        filepath: Union[str, Path],
        command: str = "nuke",
        regions: Optional[Sequence[str]] = None,
    ) -> Path:
        """Export nuke result to JSON file.

        Args:
            result: AggregatedResult to export
            filepath: Destination file path
            command: Command that produced the result
            regions: Regions targeted by the run

        Returns:
            Path to the written file
        """
        path = export_to_json(self.to_dict(result, command=command, regions=regions), filepath)
        self.console.print(f"[green]✓ Nuke report exported to {path}[/green]")
        return path

    def export_csv(self, result: AggregatedResult, filepath: Union[str, Path]) -> Path:
        """Export nuke result to CSV file, one row per identifier.

        Args:
            result: AggregatedResult to export
            filepath: Destination file path
        """
        rows = [
            {
                "resource_type": record.resource_type,
                "region": record.region,
                "identifier": record.identifier,
                "outcome": record.outcome,
                "error_kind": record.error_kind,
                "error": record.error_message,
                "timestamp": record.timestamp.isoformat(),
            }
            for record in result.records
        ]
        path = export_to_csv(rows, filepath)
        self.console.print(f"[green]✓ Nuke report exported to {path}[/green]")
        return path
