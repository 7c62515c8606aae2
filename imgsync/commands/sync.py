"""
Sync command for imgsync.

Copies the selected tags of every configured source repository to the
target repository.
"""

import click
import json
import sys

from ..config import load_config
from ..domain.result import SyncStatus
from ..exit_codes import ImgsyncError, get_exit_code_for_exception
from ..infra.registry_client import RegistryClient
from ..services.sync_service import SyncService


@click.command('sync')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSONL')
@click.option('--pretty', is_flag=True, help='Display progress with rich formatting')
@click.pass_context
def sync_handler(ctx, output_json: bool, pretty: bool):
    """
    Sync images from sources to target.

    Examples:

        # Use ./.imgsync.yaml
        imgsync sync

        # Explicit configuration file, verbose
        imgsync -c mirror.yaml -l debug sync

        # Machine-readable output
        imgsync -c mirror.yaml sync --json
    """
    obj = ctx.ensure_object(dict)
    logger = obj.get('logger')

    try:
        config = load_config(obj.get('confpath', ''))
        client = RegistryClient()
        try:
            service = SyncService(config, client, logger=logger)

            if pretty:
                _sync_pretty(service)
            elif output_json:
                _sync_json(service)
            else:
                _sync_simple(service)
        finally:
            client.close()

    except ImgsyncError as e:
        if output_json:
            error = {
                'error': str(e),
                'type': type(e).__name__,
            }
            print(json.dumps(error), file=sys.stderr)
        else:
            print(f"Error: sync command: {e}", file=sys.stderr)
        sys.exit(get_exit_code_for_exception(e))
    except KeyboardInterrupt as e:
        print("Interrupted", file=sys.stderr)
        sys.exit(get_exit_code_for_exception(e))


def _sync_simple(service: SyncService):
    """Simple text output for sync."""
    for progress in service.sync():
        print(progress, file=sys.stderr)

    result = service.last_result
    if result:
        print("\nSync complete:", file=sys.stderr)
        print(f"  Sources synced: {result.sources_synced}", file=sys.stderr)
        print(f"  Sources up-to-date: {result.sources_up_to_date}", file=sys.stderr)
        print(f"  Tags copied: {result.tags_copied}", file=sys.stderr)

        # Only recovered errors can remain here (continueOnSyncError)
        if not result.success:
            print(f"\nIgnored errors ({len(result.errors)}):", file=sys.stderr)
            for error in result.errors:
                print(f"  - {error}", file=sys.stderr)


def _sync_json(service: SyncService):
    """JSONL output for sync."""
    for progress in service.sync():
        print(json.dumps({'progress': progress}), flush=True)

    result = service.last_result
    if result:
        for source in result.sources:
            print(json.dumps(source.to_dict()), flush=True)
        print(json.dumps(result.to_dict()), flush=True)


def _sync_pretty(service: SyncService):
    """Rich formatted output for sync."""
    from rich.console import Console
    from rich.progress import Progress, SpinnerColumn, TextColumn
    from rich.table import Table

    console = Console(stderr=True)
    config = service.config

    console.print(f"\n[bold]Target:[/bold] {config.target.address}")
    console.print(f"[bold]Sources:[/bold] {len(config.sources)}")
    if config.continue_on_sync_error:
        console.print("[dim]Continuing on sync errors[/dim]")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Starting sync...", total=None)
        for message in service.sync():
            progress.update(task, description=message)

    result = service.last_result
    if not result:
        console.print("[red]Sync failed - no result[/red]")
        sys.exit(1)

    table = Table(title="Sync Summary", show_header=True)
    table.add_column("Source", style="cyan")
    table.add_column("Target")
    table.add_column("Selected", justify="right")
    table.add_column("Copied", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Status")

    styles = {
        SyncStatus.SUCCESS: "[green]synced[/green]",
        SyncStatus.UP_TO_DATE: "[dim]up-to-date[/dim]",
        SyncStatus.FAILED: "[red]failed[/red]",
    }
    for source in result.sources:
        table.add_row(
            source.source_address,
            source.target_address or "-",
            str(source.selected),
            str(source.copied),
            str(source.failed),
            styles[source.status],
        )

    console.print(table)

    if not result.success:
        console.print(f"\n[yellow]Ignored errors ({len(result.errors)}):[/yellow]")
        for error in result.errors:
            console.print(f"  [yellow]•[/yellow] {error}")
    else:
        console.print(f"\n[bold green]✓[/bold green] Sync complete: {result.tags_copied} tags copied")
