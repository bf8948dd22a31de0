"""CLI error handling helpers."""

import click

from protracker.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def save_or_exit(ctx: click.Context, working_set) -> None:
    """Persist the working set, exiting with failure if the store rejects it."""
    if not ctx.obj["workspace"].save(working_set):
        click.echo("Error: Changes could not be saved", err=True)
        ctx.exit(1)
