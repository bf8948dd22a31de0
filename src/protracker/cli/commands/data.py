"""Export, import, sync and recovery commands."""

import click
from protracker.domain.errors import InvalidSnapshotError
from protracker.domain.merge import MergeMode
from protracker.domain.sync import SyncState


@click.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), help="Write to file instead of stdout")
@click.pass_context
def export_data(ctx, output: str | None):
    """Export all records as a checksummed JSON document."""
    workspace = ctx.obj["workspace"]

    try:
        document = workspace.export_data()
    except InvalidSnapshotError as e:
        click.echo(f"Error: Export failed: {e}", err=True)
        ctx.exit(1)

    if output is None:
        click.echo(document)
        return
    with open(output, "w", encoding="utf-8") as f:
        f.write(document)
    click.echo(f"Exported data to {output}")


@click.command("import")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--mode",
    type=click.Choice([m.value for m in MergeMode]),
    default=MergeMode.MERGE.value,
    show_default=True,
    help="replace: substitute all records; merge: add records with new ids only",
)
@click.pass_context
def import_data(ctx, json_file: str, mode: str):
    """Import records from an exported (or legacy) JSON document."""
    workspace = ctx.obj["workspace"]

    with open(json_file, "r", encoding="utf-8-sig") as f:
        document = f.read()

    result = workspace.import_data(document, mode)
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
    if not result.success:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)

    data = result.data
    click.echo(f"\nImport complete ({mode}):")
    click.echo(f"  Clients: {len(data.clients)}")
    click.echo(f"  Projects: {len(data.projects)}")
    click.echo(f"  Time entries: {len(data.time_entries)}")
    click.echo(f"  Invoices: {len(data.invoices)}")
    click.echo(f"  Payments: {len(data.payments)}")
    if result.warnings:
        click.echo(f"  Warnings: {len(result.warnings)}")


@click.command("sync")
@click.option("--startup", is_flag=True, help="Run the one-time payment migration before syncing")
@click.pass_context
def sync(ctx, startup: bool):
    """Sync records with the replica store (most recent wins)."""
    workspace = ctx.obj["workspace"]

    outcome = workspace.startup() if startup else workspace.sync()
    if outcome.state is SyncState.ERROR:
        click.echo(f"Error: Sync failed: {outcome.error}", err=True)
        ctx.exit(1)

    messages = {
        "initial_backup": "No replica found; current data backed up",
        "restored_from_replica": "Replica is newer; local data replaced",
        "backed_up": "Local data is newer; backed up to replica",
        "up_to_date": "Already up to date",
    }
    click.echo(f"Sync complete: {messages[outcome.action.value]}")


@click.command("recover")
@click.pass_context
def recover(ctx):
    """Restore records from the latest replica (or primary storage)."""
    workspace = ctx.obj["workspace"]

    snapshot = workspace.recover()
    if snapshot is None:
        click.echo("Error: No data available to recover", err=True)
        ctx.exit(1)
    click.echo(
        f"Recovered {len(snapshot.clients)} clients, {len(snapshot.projects)} projects, "
        f"{len(snapshot.time_entries)} time entries, {len(snapshot.invoices)} invoices"
    )


def register_commands(cli):
    """Register data commands with main CLI."""
    cli.add_command(export_data)
    cli.add_command(import_data)
    cli.add_command(sync)
    cli.add_command(recover)
