"""Payment and reconciliation commands."""

import click
from protracker.cli.error_handling import handle_domain_error, save_or_exit
from protracker.domain.errors import DomainError
from protracker.utils.amount_parser import parse_amount
from protracker.utils.date_parser import parse_date
from protracker.utils.record_resolver import resolve_invoice


@click.group()
def payment_group():
    """Record and remove invoice payments."""
    pass


@payment_group.command("add")
@click.argument("invoice_ref", metavar="INVOICE")
@click.argument("amount")
@click.option("--tds", help="Tax deducted at source, counted toward settlement")
@click.option("--date", "payment_date", default="today", help="Payment date (YYYY-MM-DD or relative)")
@click.option("--method", default="", help="Payment method (e.g., 'wire')")
@click.option("--notes", default="", help="Notes")
@click.pass_context
def add_payment(ctx, invoice_ref: str, amount: str, tds: str | None, payment_date: str, method: str, notes: str):
    """Record a payment against an invoice.

    INVOICE can be an invoice number (e.g. INV-0001) or ID.

    Examples:
        protracker payment add INV-0001 400
        protracker payment add INV-0001 540 --tds 60 --method wire
    """
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        parsed_amount = parse_amount(amount)
        parsed_tds = parse_amount(tds) if tds is not None else None
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_date = parse_date(payment_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        invoice = resolve_invoice(working_set, invoice_ref)
        payment = workspace.payments.add_payment(
            working_set,
            invoice.id,
            parsed_amount,
            tds_amount=parsed_tds,
            payment_date=parsed_date,
            method=method,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    save_or_exit(ctx, working_set)
    invoice = resolve_invoice(working_set, invoice.id)
    click.echo(f"Recorded payment {payment.id} on {invoice.invoice_number}")
    click.echo(f"Status: {invoice.payment_status.value}")


@payment_group.command("remove")
@click.argument("payment_id")
@click.pass_context
def remove_payment(ctx, payment_id: str):
    """Remove a payment and recompute its invoice."""
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        payment = workspace.payments.remove_payment(working_set, payment_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    save_or_exit(ctx, working_set)
    invoice = next((i for i in working_set.invoices if i.id == payment.invoice_id), None)
    if invoice is None:
        click.echo(
            f"Removed payment {payment.id} (invoice {payment.invoice_id} no longer exists)"
        )
        return
    click.echo(f"Removed payment {payment.id} from {invoice.invoice_number}")
    click.echo(f"Status: {invoice.payment_status.value}")


@payment_group.command("list")
@click.argument("invoice_ref", metavar="INVOICE")
@click.pass_context
def list_payments(ctx, invoice_ref: str):
    """List payments recorded against an invoice."""
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        invoice = resolve_invoice(working_set, invoice_ref)
    except DomainError as e:
        handle_domain_error(ctx, e)

    payments = workspace.payments.payments_for_invoice(working_set, invoice.id)
    if not payments:
        click.echo(f"No payments recorded on {invoice.invoice_number}.")
        return

    for payment in payments:
        when = payment.date.isoformat() if payment.date else "-"
        tds = f" + TDS {payment.tds_amount}" if payment.tds_amount else ""
        click.echo(f"{payment.id} | {when} | {payment.amount}{tds} | {payment.method}")
    click.echo(
        f"Total: {invoice.paid_amount} + TDS {invoice.tds_received} of {invoice.total_amount} "
        f"({invoice.payment_status.value})"
    )


@click.command("reconcile")
@click.pass_context
def reconcile(ctx):
    """Recompute payment status for every invoice from its payments."""
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    workspace.payments.reconcile_working_set(working_set)
    save_or_exit(ctx, working_set)
    click.echo(f"Reconciled {len(working_set.invoices)} invoice(s)")


def register_commands(cli):
    """Register payment commands with main CLI."""
    cli.add_command(payment_group, name="payment")
    cli.add_command(reconcile)
