"""Client, project, time entry and exchange rate commands."""

import click
from protracker.cli.error_handling import handle_domain_error, save_or_exit
from protracker.domain.entities import ExchangeRate
from protracker.domain.errors import DomainError
from protracker.domain.exchange import update_exchange_rate
from protracker.domain.records import RecordService
from protracker.utils.amount_parser import parse_amount
from protracker.utils.date_parser import parse_date
from protracker.utils.record_resolver import resolve_client, resolve_project


@click.group()
def client_group():
    """Manage clients."""
    pass


@client_group.command("add")
@click.argument("name", metavar="CLIENT_NAME")
@click.option("--contact", default="", help="Contact person")
@click.option("--email", default="", help="Contact email")
@click.option("--address", default="", help="Billing address")
@click.pass_context
def add_client(ctx, name: str, contact: str, email: str, address: str):
    """Add a client.

    Examples:
        protracker client add "Acme Corp" --email billing@acme.example
    """
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        client = RecordService().add_client(
            working_set, name, contact_name=contact, contact_email=email, billing_address=address
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    save_or_exit(ctx, working_set)
    click.echo(f"Created client '{client.name}' (ID: {client.id})")


@client_group.command("list")
@click.pass_context
def list_clients(ctx):
    """List all clients."""
    working_set = ctx.obj["workspace"].load()

    if not working_set.clients:
        click.echo("No clients found.")
        return

    click.echo("\nClients:")
    click.echo("-" * 60)
    for client in working_set.clients:
        click.echo(f"{client.id} | {client.name}")


@click.group()
def project_group():
    """Manage projects."""
    pass


@project_group.command("add")
@click.argument("name", metavar="PROJECT_NAME")
@click.option("--client", "client_ref", required=True, help="Client name or ID")
@click.option("--rate", default="0", help="Hourly rate (e.g., 85 or 85.50)")
@click.option("--currency", default="USD", show_default=True, help="Billing currency")
@click.option("--description", default="", help="Project description")
@click.pass_context
def add_project(ctx, name: str, client_ref: str, rate: str, currency: str, description: str):
    """Add a project for a client.

    Examples:
        protracker project add "Website" --client "Acme Corp" --rate 85
    """
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        hourly_rate = parse_amount(rate)
    except ValueError as e:
        click.echo(f"Error: Invalid rate format: {e}", err=True)
        ctx.exit(1)

    try:
        client = resolve_client(working_set, client_ref)
        project = RecordService().add_project(
            working_set, client.id, name, hourly_rate=hourly_rate, currency=currency, description=description
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    save_or_exit(ctx, working_set)
    click.echo(f"Created project '{project.name}' for '{client.name}' (ID: {project.id})")


@project_group.command("list")
@click.pass_context
def list_projects(ctx):
    """List all projects."""
    working_set = ctx.obj["workspace"].load()

    if not working_set.projects:
        click.echo("No projects found.")
        return

    clients = {c.id: c.name for c in working_set.clients}
    click.echo("\nProjects:")
    click.echo("-" * 80)
    for project in working_set.projects:
        client_name = clients.get(project.client_id, "(unknown client)")
        click.echo(
            f"{project.id} | {project.name:20s} | {client_name:20s} | "
            f"{project.hourly_rate} {project.currency}/h | {project.status.value}"
        )


@click.group()
def entry_group():
    """Manage time entries."""
    pass


@entry_group.command("add")
@click.option("--project", "project_ref", required=True, help="Project name or ID")
@click.option(
    "--date",
    "entry_date",
    default="today",
    help="Entry date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--hours", required=True, help="Hours worked (e.g., 1.5)")
@click.option("--description", default="", help="What was done")
@click.option("--non-billable", is_flag=True, help="Exclude this entry from billing")
@click.pass_context
def add_entry(ctx, project_ref: str, entry_date: str, hours: str, description: str, non_billable: bool):
    """Log time against a project.

    Examples:
        protracker entry add --project Website --hours 2.5 --description "Layout"
        protracker entry add --project Website --date yesterday --hours 1
    """
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        parsed_date = parse_date(entry_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_hours = parse_amount(hours)
    except ValueError as e:
        click.echo(f"Error: Invalid hours format: {e}", err=True)
        ctx.exit(1)

    try:
        project = resolve_project(working_set, project_ref)
        entry = RecordService().add_time_entry(
            working_set,
            project.id,
            parsed_date,
            parsed_hours,
            description=description,
            is_billable=not non_billable,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    save_or_exit(ctx, working_set)
    click.echo(f"Logged {entry.hours}h on '{project.name}' for {entry.date.isoformat()} (ID: {entry.id})")


@entry_group.command("list")
@click.option("--unbilled", is_flag=True, help="Only show entries not yet on an invoice")
@click.pass_context
def list_entries(ctx, unbilled: bool):
    """List time entries, most recent first."""
    working_set = ctx.obj["workspace"].load()

    entries = working_set.time_entries
    if unbilled:
        entries = [e for e in entries if e.invoice_id is None and e.is_billable]
    if not entries:
        click.echo("No time entries found.")
        return

    projects = {p.id: p.name for p in working_set.projects}
    for entry in entries:
        billed = "billed" if entry.invoice_id else ("unbilled" if entry.is_billable else "non-billable")
        click.echo(
            f"{entry.id} | {entry.date.isoformat()} | {projects.get(entry.project_id, '(unknown project)'):20s} | "
            f"{entry.hours:>6}h | {billed} | {entry.description}"
        )


@click.group()
def rate_group():
    """Manage currency exchange rates."""
    pass


@rate_group.command("set")
@click.argument("from_currency")
@click.argument("to_currency")
@click.argument("rate")
@click.pass_context
def set_rate(ctx, from_currency: str, to_currency: str, rate: str):
    """Set the exchange rate from one currency to another.

    Examples:
        protracker rate set USD INR 83.2
    """
    workspace = ctx.obj["workspace"]
    working_set = workspace.load()

    try:
        parsed_rate = parse_amount(rate)
    except ValueError as e:
        click.echo(f"Error: Invalid rate format: {e}", err=True)
        ctx.exit(1)

    pair = (from_currency.upper(), to_currency.upper())
    exchange_rate = ExchangeRate(
        id=f"{pair[0]}-{pair[1]}",
        from_currency=pair[0],
        to_currency=pair[1],
        rate=parsed_rate,
        updated_on=parse_date("today"),
    )
    try:
        update_exchange_rate(working_set, exchange_rate)
    except DomainError as e:
        handle_domain_error(ctx, e)

    save_or_exit(ctx, working_set)
    click.echo(f"Exchange rate {pair[0]} -> {pair[1]} set to {parsed_rate}")


def register_commands(cli):
    """Register record commands with main CLI."""
    cli.add_command(client_group, name="client")
    cli.add_command(project_group, name="project")
    cli.add_command(entry_group, name="entry")
    cli.add_command(rate_group, name="rate")
