"""Replica backup commands."""

from datetime import datetime, UTC

import click
from protracker.domain.errors import ValidationError


@click.group()
def backup_group():
    """Manage replica backups."""
    pass


@backup_group.command("now")
@click.pass_context
def backup_now(ctx):
    """Write a replica of the current records."""
    workspace = ctx.obj["workspace"]

    if not workspace.backup():
        click.echo("Error: Backup failed", err=True)
        ctx.exit(1)
    click.echo("Backup complete")


@backup_group.command("list")
@click.pass_context
def list_backups(ctx):
    """List replicas, most recent first."""
    workspace = ctx.obj["workspace"]

    replicas = workspace.replicas.list_replicas()
    if not replicas:
        click.echo("No backups found.")
        return

    click.echo("\nBackups:")
    click.echo("-" * 60)
    for key, timestamp in replicas:
        when = datetime.fromtimestamp(timestamp / 1000, UTC).strftime("%Y-%m-%d %H:%M:%S")
        click.echo(f"{when} UTC | {key}")


@backup_group.command("prune")
@click.option("--keep", type=int, required=True, help="Number of most recent backups to keep")
@click.pass_context
def prune_backups(ctx, keep: int):
    """Delete all but the most recent backups."""
    workspace = ctx.obj["workspace"]

    try:
        deleted = workspace.replicas.prune(keep)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Deleted {deleted} backup{'s' if deleted != 1 else ''}")


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
