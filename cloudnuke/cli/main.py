"""Main CLI entry point using Typer."""

import logging
import sys
import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from ..aws.client import get_enabled_regions
from ..aws.credentials import CredentialValidationError, validate_credentials
from ..aws.resources import default_registry
from ..models.filter_config import NukeRules
from ..models.plan import Plan
from ..nuke.audit import AuditStorage
from ..nuke.batching import BatchController
from ..nuke.errors import PlanError
from ..nuke.nuker import ResourceNuker
from ..nuke.planner import PlanResolver
from ..nuke.poller import ConfirmationPoller
from ..nuke.registry import ResourceRegistry
from ..nuke.reporter import NukeReporter
from ..utils.durations import parse_duration
from ..utils.export import detect_format
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="cloudnuke",
    help="cloudnuke - Remove cloud resources in bulk across regions",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None

CONFIRMATION_WORD = "nuke"
CONFIRMATION_ATTEMPTS = 3
FORCE_COUNTDOWN_SECONDS = 10


@app.callback()
def main(
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """cloudnuke - Remove cloud resources in bulk across regions."""
    global config

    # Load configuration
    try:
        config = Config.load()
    except ValueError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Override with CLI options
    if profile:
        config.aws_profile = profile

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    try:
        setup_logging(level=log_level, verbose=verbose)
    except ValueError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"cloudnuke version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


@app.command("resource-types")
def resource_types():
    """List the resource types that can be nuked."""
    registry = default_registry(config.aws_profile)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Resource Type", style="cyan")
    table.add_column("Scope")
    table.add_column("Batch Size", justify="right")

    for resource_type in registry:
        scope = "global" if resource_type.is_global else "regional"
        table.add_row(resource_type.name, scope, str(resource_type.max_batch_size))

    console.print(table)


def _time_window(older_than: Optional[str], newer_than: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Convert --older-than/--newer-than durations into (exclude_after, include_after)."""
    now = datetime.now(timezone.utc)
    exclude_after = now - parse_duration(older_than) if older_than else None
    include_after = now - parse_duration(newer_than) if newer_than else None
    return exclude_after, include_after


def _resolve_plan(
    registry: ResourceRegistry,
    rules: NukeRules,
    regions: Optional[List[str]],
    exclude_regions: Optional[List[str]],
    resource_type_names: Optional[List[str]],
    exclude_resource_types: Optional[List[str]],
) -> Plan:
    enabled_regions = get_enabled_regions(config.aws_profile)
    resolver = PlanResolver(registry, enabled_regions)
    plan = resolver.resolve(
        requested_regions=regions,
        excluded_regions=exclude_regions,
        requested_types=resource_type_names,
        excluded_types=exclude_resource_types,
    )
    resolver.validate_resource_types(rules.resource_types)
    return plan


def _build_nuker(registry: ResourceRegistry) -> ResourceNuker:
    return ResourceNuker(
        registry,
        controller=BatchController(max_concurrent=config.max_concurrent, batch_pause=config.batch_pause_seconds),
        poller=ConfirmationPoller(
            max_attempts=config.confirm_max_attempts,
            interval=config.confirm_interval_seconds,
        ),
    )


def _prepare(
    regions: Optional[List[str]],
    exclude_regions: Optional[List[str]],
    resource_type_names: Optional[List[str]],
    exclude_resource_types: Optional[List[str]],
    older_than: Optional[str],
    newer_than: Optional[str],
    rules_path: Optional[str],
) -> tuple[ResourceNuker, Plan, NukeRules, Optional[datetime], Optional[datetime]]:
    """Validate inputs and credentials, then resolve the plan.

    Exits with code 1 on any invalid input.
    """
    try:
        exclude_after, include_after = _time_window(older_than, newer_than)
    except ValueError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)

    rules = NukeRules()
    if rules_path:
        try:
            rules = NukeRules.load(rules_path)
        except FileNotFoundError:
            console.print(f"✗ Config file not found: {rules_path}", style="bold red")
            raise typer.Exit(code=1)
        except ValueError as e:
            console.print(f"✗ Invalid config file: {e}", style="bold red")
            raise typer.Exit(code=1)

    console.print("🔐 Validating AWS credentials...")
    try:
        identity = validate_credentials(config.aws_profile)
    except CredentialValidationError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)
    console.print(f"✓ Authenticated as: {identity['arn']}\n", style="green")

    registry = default_registry(config.aws_profile)
    try:
        plan = _resolve_plan(registry, rules, regions, exclude_regions, resource_type_names, exclude_resource_types)
    except PlanError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)

    console.print(f"Regions: {', '.join(plan.regions)}")
    console.print(f"Resource types: {', '.join(plan.resource_types)}\n")

    return _build_nuker(registry), plan, rules, exclude_after, include_after


def confirm_nuke() -> bool:
    """Ask the user to type the confirmation word, allowing a few attempts."""
    for attempt in range(1, CONFIRMATION_ATTEMPTS + 1):
        answer = typer.prompt(
            f"Are you sure you want to nuke all listed resources? Enter '{CONFIRMATION_WORD}' to confirm",
            default="",
            show_default=False,
        )
        if answer.strip() == CONFIRMATION_WORD:
            return True
        remaining = CONFIRMATION_ATTEMPTS - attempt
        if remaining:
            console.print(f"Invalid value was entered ({remaining} attempt(s) left)", style="yellow")
    return False


def _countdown(seconds: int) -> None:
    console.print(f"⚠️  --force is set: nuking in {seconds} seconds, press Ctrl+C to abort", style="bold yellow")
    for remaining in range(seconds, 0, -1):
        console.print(f"  {remaining}...")
        time.sleep(1)


@app.command()
def nuke(
    regions: Optional[List[str]] = typer.Option(None, "--region", "-r", help="Region to nuke (repeatable, default: all)"),
    exclude_regions: Optional[List[str]] = typer.Option(None, "--exclude-region", help="Region to skip (repeatable)"),
    resource_type_names: Optional[List[str]] = typer.Option(
        None, "--resource-type", "-t", help="Resource type to nuke (repeatable, default: all)"
    ),
    exclude_resource_types: Optional[List[str]] = typer.Option(
        None, "--exclude-resource-type", help="Resource type to skip (repeatable)"
    ),
    older_than: Optional[str] = typer.Option(
        None, "--older-than", help="Only nuke resources older than this duration (e.g. 24h, 7d)"
    ),
    newer_than: Optional[str] = typer.Option(
        None, "--newer-than", help="Only nuke resources newer than this duration (e.g. 1h)"
    ),
    rules_path: Optional[str] = typer.Option(None, "--config", help="YAML file with per-resource-type name/tag rules"),
    dry_run: bool = typer.Option(False, "--dry-run", help="List resources that would be nuked without deleting"),
    force: bool = typer.Option(False, "--force", help="Skip the confirmation prompt"),
    export: Optional[str] = typer.Option(None, "--export", help="Export results to file (.json or .csv)"),
    no_audit: bool = typer.Option(False, "--no-audit", help="Do not write an audit log"),
):
    """Nuke resources across regions.

    Resources are discovered, listed, and deleted only after confirmation. Each
    resource type is nuked in bounded batches; failures are reported per
    resource and never stop the rest of the run.

    Exit codes: 0 success, 1 invalid input, 2 unexpected error, 3 partial failure.

    Examples:
    - Everything in one region: cloudnuke nuke -r us-east-1
    - Old IAM roles only: cloudnuke nuke -t iam-role --older-than 7d
    - Preview: cloudnuke nuke --dry-run
    """
    try:
        if export:
            try:
                export_format = detect_format(export)
            except ValueError as e:
                console.print(f"✗ Error: {e}", style="bold red")
                raise typer.Exit(code=1)

        nuker, plan, rules, exclude_after, include_after = _prepare(
            regions, exclude_regions, resource_type_names, exclude_resource_types, older_than, newer_than, rules_path
        )

        started_at = datetime.now(timezone.utc)
        with console.status("Searching for resources..."):
            inventory = nuker.discover(plan, rules, exclude_after=exclude_after, include_after=include_after)

        reporter = NukeReporter(console)
        reporter.display_inventory(inventory)

        if dry_run or not inventory.has_candidates:
            if dry_run:
                console.print("\n[bold cyan]Dry run: no resources were nuked[/bold cyan]")
            result = nuker.discovery_result(inventory)
            operation = nuker.build_operation(
                plan, inventory, result, started_at, dry_run=dry_run, aws_profile=config.aws_profile
            )
            if not no_audit:
                AuditStorage(config.storage_path).log_operation(operation, result.records)
            raise typer.Exit(code=3 if result.has_failures else 0)

        if force:
            _countdown(FORCE_COUNTDOWN_SECONDS)
        elif not confirm_nuke():
            console.print("\n✗ Nuke cancelled, nothing was deleted", style="yellow")
            raise typer.Exit(code=0)

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Nuking resources", total=inventory.total_candidates)
            result = nuker.nuke(inventory, on_record=lambda record: progress.advance(task))

        operation = nuker.build_operation(plan, inventory, result, started_at, aws_profile=config.aws_profile)
        reporter.display_result(result)

        if export:
            if export_format == "json":
                reporter.export_json(result, export, regions=plan.regions)
            else:
                reporter.export_csv(result, export)

        if not no_audit:
            audit_file = AuditStorage(config.storage_path).log_operation(operation, result.records)
            console.print(f"Audit log: {audit_file}", style="dim")

        if result.has_failures:
            console.print(
                f"\n⚠️  {len(result.failed)} resource(s) failed and {len(result.general_errors)} general error(s)",
                style="bold yellow",
            )
            raise typer.Exit(code=3)

        console.print(f"\n✓ Nuked {len(result.succeeded)} resource(s)", style="bold green")

    except typer.Exit:
        # Re-raise Exit exceptions (normal exit codes)
        raise
    except Exception as e:
        console.print(f"✗ Error during nuke: {e}", style="bold red")
        logger.exception("Error in nuke command")
        raise typer.Exit(code=2)


@app.command()
def inspect(
    regions: Optional[List[str]] = typer.Option(None, "--region", "-r", help="Region to inspect (repeatable)"),
    exclude_regions: Optional[List[str]] = typer.Option(None, "--exclude-region", help="Region to skip (repeatable)"),
    resource_type_names: Optional[List[str]] = typer.Option(
        None, "--resource-type", "-t", help="Resource type to inspect (repeatable)"
    ),
    exclude_resource_types: Optional[List[str]] = typer.Option(
        None, "--exclude-resource-type", help="Resource type to skip (repeatable)"
    ),
    older_than: Optional[str] = typer.Option(None, "--older-than", help="Only resources older than this duration"),
    newer_than: Optional[str] = typer.Option(None, "--newer-than", help="Only resources newer than this duration"),
    rules_path: Optional[str] = typer.Option(None, "--config", help="YAML file with per-resource-type name/tag rules"),
    show_skipped: bool = typer.Option(False, "--show-skipped", help="Also list resources filtered out, with reasons"),
):
    """List resources that a nuke with the same options would delete."""
    try:
        nuker, plan, rules, exclude_after, include_after = _prepare(
            regions, exclude_regions, resource_type_names, exclude_resource_types, older_than, newer_than, rules_path
        )

        with console.status("Searching for resources..."):
            inventory = nuker.discover(plan, rules, exclude_after=exclude_after, include_after=include_after)

        NukeReporter(console).display_inventory(inventory, show_excluded=show_skipped)

        if inventory.errors:
            raise typer.Exit(code=3)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"✗ Error during inspect: {e}", style="bold red")
        logger.exception("Error in inspect command")
        raise typer.Exit(code=2)


@app.command()
def history(
    operation_id: Optional[str] = typer.Argument(None, help="Show the records of one operation"),
    since_days: Optional[int] = typer.Option(None, "--since-days", help="Only operations from the last N days"),
):
    """Show audit-logged nuke runs."""
    try:
        storage = AuditStorage(config.storage_path)

        if operation_id:
            audit_data = storage.get_operation(operation_id)
            if audit_data is None:
                console.print(f"✗ Operation '{operation_id}' not found", style="bold red")
                raise typer.Exit(code=1)
            _display_operation(audit_data)
            return

        since = None
        if since_days is not None:
            since = datetime.now(timezone.utc) - timedelta(days=since_days)

        operations = storage.query_operations(since=since)
        if not operations:
            console.print("No nuke runs recorded", style="yellow")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Operation", style="cyan")
        table.add_column("Timestamp")
        table.add_column("Mode")
        table.add_column("Status")
        table.add_column("Deleted", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")

        for audit_data in operations:
            operation = audit_data["operation"]
            table.add_row(
                operation["operation_id"],
                operation["timestamp"],
                operation["mode"],
                operation["status"],
                str(operation["succeeded_count"]),
                str(operation["failed_count"]),
            )

        console.print(table)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"✗ Error reading history: {e}", style="bold red")
        logger.exception("Error in history command")
        raise typer.Exit(code=2)


def _display_operation(audit_data: dict) -> None:
    operation = audit_data["operation"]
    console.print(f"[bold]Operation {operation['operation_id']}[/bold]")
    console.print(f"  Timestamp: {operation['timestamp']}")
    console.print(f"  Mode: {operation['mode']}  Status: {operation['status']}")
    console.print(f"  Regions: {', '.join(operation.get('regions') or [])}")
    console.print(f"  Deleted: {operation['succeeded_count']}  Failed: {operation['failed_count']}\n")

    records = audit_data.get("records") or []
    if not records:
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Resource Type", style="cyan")
    table.add_column("Region")
    table.add_column("Identifier")
    table.add_column("Outcome")
    table.add_column("Error", style="red")
    for record in records:
        table.add_row(
            record["resource_type"], record["region"], record["identifier"], record["outcome"], record.get("error") or ""
        )
    console.print(table)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
