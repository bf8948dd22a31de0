"""Invoice commands."""

from datetime import timedelta

import click
from protracker.cli.error_handling import handle_domain_error, save_or_exit
from protracker.domain.errors import DomainError
from protracker.domain.records import RecordService
from protracker.utils.amount_parser import parse_amount
from protracker.utils.date_parser import parse_date
from protracker.utils.record_resolver import resolve_client


@click.group()
def invoice_group():
    """Manage invoices."""
    pass


@invoice_group.command("create")
@click.option("--client", "client_ref", required=True, help="Client name or ID")
@click.option(
    "--entry",
    "entry_ids",
    multiple=True,
    help="Time entry ID to bill (repeatable; defaults to all unbilled billable entries for the client)",
)
@click.option("--issue-date", default="today", help="Issue date (YYYY-MM-DD or relative)")
@click.option("--due-days", type=click.IntRange(min=0), default=30, show_default=True, help="Days until due")
@click.option("--total", help="Invoice total (defaults to hours times project rate)")
@click.pass_context
def create_invoice(ctx, client_ref: str, entry_ids: tuple[str, ...], issue_date: str, due_days: int, total: str | None):
    """Create an invoice for a client's time entries.

    Examples:
        protracker invoice create --client "Acme Corp"
        protracker invoice create --client "Acme Corp" --entry 3f2a... --total 500
    """
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        issued = parse_date(issue_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    total_amount = None
    if total is not None:
        try:
            total_amount = parse_amount(total)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        client = resolve_client(working_set, client_ref)
        if not entry_ids:
            client_projects = {p.id for p in working_set.projects if p.client_id == client.id}
            entry_ids = tuple(
                e.id
                for e in working_set.time_entries
                if e.project_id in client_projects and e.invoice_id is None and e.is_billable
            )
        if not entry_ids and total_amount is None:
            click.echo(f"Error: No unbilled time entries for '{client.name}'", err=True)
            ctx.exit(1)
        invoice = RecordService().create_invoice(
            working_set,
            client.id,
            list(entry_ids),
            issue_date=issued,
            due_date=issued + timedelta(days=due_days),
            total_amount=total_amount,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    save_or_exit(ctx, working_set)
    click.echo(
        f"Created invoice {invoice.invoice_number} for '{client.name}': "
        f"{invoice.total_amount} {invoice.currency} ({len(invoice.time_entry_ids)} entries)"
    )


@invoice_group.command("list")
@click.pass_context
def list_invoices(ctx):
    """List invoices with their payment status."""
    working_set = ctx.obj["workspace"].load()

    if not working_set.invoices:
        click.echo("No invoices found.")
        return

    clients = {c.id: c.name for c in working_set.clients}
    click.echo("\nInvoices:")
    click.echo("-" * 90)
    for invoice in working_set.invoices:
        settled = invoice.paid_amount + invoice.tds_received
        click.echo(
            f"{invoice.invoice_number} | {clients.get(invoice.client_id, '(unknown client)'):20s} | "
            f"{invoice.total_amount:>10} {invoice.currency} | settled {settled:>10} | "
            f"{invoice.status.value} / {invoice.payment_status.value}"
        )


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
