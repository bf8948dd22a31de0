"""Main CLI entry point."""

import logging

import click
from protracker.database.factories import create_sqlite_database, create_replica_database
from protracker.domain.replica_store import DEFAULT_KEEP_REPLICAS
from protracker.domain.workspace import WorkspaceService

# Import and register all commands at module level
from protracker.cli.commands import (
    backup,
    data,
    invoice,
    payment,
    records,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PROTRACKER_DB_PATH environment variable)",
    envvar="PROTRACKER_DB_PATH",
)
@click.option(
    "--replica-path",
    type=click.Path(),
    help="Path to replica database file (overrides PROTRACKER_REPLICA_PATH environment variable)",
    envvar="PROTRACKER_REPLICA_PATH",
)
@click.option(
    "--keep-replicas",
    type=click.IntRange(min=0),
    default=DEFAULT_KEEP_REPLICAS,
    show_default=True,
    envvar="PROTRACKER_KEEP_REPLICAS",
    help="Replicas kept after each backup (0 keeps all)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, replica_path: str | None, keep_replicas: int, verbose: bool):
    """ProTracker - business records backup, sync and payment reconciliation.

    Keeps clients, projects, time entries, invoices and payments in a primary
    store, mirrors them to a replica store, and imports or exports them as
    checksummed JSON documents.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)

    # Initialize database connections only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        replica_db = create_replica_database(database_path=replica_path)
        replica_db.connect()
        replica_db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.call_on_close(replica_db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["replica_db"] = replica_db
        ctx.obj["workspace"] = WorkspaceService(db, replica_db, keep_replicas=keep_replicas)


# Register all commands
data.register_commands(cli)
backup.register_commands(cli)
records.register_commands(cli)
invoice.register_commands(cli)
payment.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
