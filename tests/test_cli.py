"""Tests for CLI commands."""

import json

import pytest

from protracker.cli.main import cli


def _id_from(output, marker):
    for line in output.splitlines():
        if marker in line:
            return line.split(marker, 1)[1].split()[0].rstrip(")")
    raise AssertionError(f"{marker!r} not found in output:\n{output}")


@pytest.fixture
def billed_client(cli_runner, cli_args):
    """Create a client with a project, two time entries and an invoice for them."""
    steps = [
        ["client", "add", "Acme Corp", "--email", "billing@acme.example"],
        ["project", "add", "Website", "--client", "Acme Corp", "--rate", "50"],
        ["entry", "add", "--project", "Website", "--date", "2024-03-01", "--hours", "1.5"],
        ["entry", "add", "--project", "Website", "--date", "2024-03-02", "--hours", "0.5"],
        ["invoice", "create", "--client", "Acme Corp", "--issue-date", "2024-03-31"],
    ]
    for step in steps:
        result = cli_runner.invoke(cli, cli_args + step)
        assert result.exit_code == 0, result.output
    return result


class TestRecords:
    """Tests for record commands."""

    def test_client_add_and_list(self, cli_runner, cli_args):
        result = cli_runner.invoke(cli, cli_args + ["client", "add", "Acme Corp"])
        assert result.exit_code == 0
        assert "Created client 'Acme Corp'" in result.output

        result = cli_runner.invoke(cli, cli_args + ["client", "list"])
        assert result.exit_code == 0
        assert "Acme Corp" in result.output

    def test_client_list_empty(self, cli_runner, cli_args):
        result = cli_runner.invoke(cli, cli_args + ["client", "list"])

        assert result.exit_code == 0
        assert "No clients found" in result.output

    def test_project_for_unknown_client(self, cli_runner, cli_args):
        result = cli_runner.invoke(cli, cli_args + ["project", "add", "Website", "--client", "Nobody"])

        assert result.exit_code == 1
        assert "Error: Client Nobody not found" in result.output

    def test_entry_invalid_hours(self, cli_runner, cli_args):
        cli_runner.invoke(cli, cli_args + ["client", "add", "Acme"])
        cli_runner.invoke(cli, cli_args + ["project", "add", "Site", "--client", "Acme"])

        result = cli_runner.invoke(cli, cli_args + ["entry", "add", "--project", "Site", "--hours", "lots"])

        assert result.exit_code == 1
        assert "Invalid hours format" in result.output

    def test_rate_set(self, cli_runner, cli_args):
        result = cli_runner.invoke(cli, cli_args + ["rate", "set", "usd", "inr", "83.2"])

        assert result.exit_code == 0
        assert "USD -> INR set to 83.2" in result.output


class TestInvoicesAndPayments:
    """Tests for invoice, payment and reconcile commands."""

    def test_invoice_totals_unbilled_entries(self, billed_client):
        assert "Created invoice INV-0001 for 'Acme Corp': 100.0 USD (2 entries)" in billed_client.output

    def test_no_unbilled_entries_left(self, cli_runner, cli_args, billed_client):
        result = cli_runner.invoke(cli, cli_args + ["invoice", "create", "--client", "Acme Corp"])

        assert result.exit_code == 1
        assert "No unbilled time entries" in result.output

    def test_payment_lifecycle(self, cli_runner, cli_args, billed_client):
        result = cli_runner.invoke(cli, cli_args + ["payment", "add", "INV-0001", "40"])
        assert result.exit_code == 0, result.output
        assert "Status: PartiallyPaid" in result.output
        first_payment = _id_from(result.output, "Recorded payment ")

        result = cli_runner.invoke(cli, cli_args + ["payment", "add", "INV-0001", "54", "--tds", "6"])
        assert result.exit_code == 0, result.output
        assert "Status: Paid" in result.output

        result = cli_runner.invoke(cli, cli_args + ["payment", "remove", first_payment])
        assert result.exit_code == 0, result.output
        assert "Status: PartiallyPaid" in result.output

        result = cli_runner.invoke(cli, cli_args + ["invoice", "list"])
        assert "Paid / PartiallyPaid" in result.output

        result = cli_runner.invoke(cli, cli_args + ["payment", "list", "INV-0001"])
        assert "Total: 54 + TDS 6 of 100" in result.output

    def test_negative_payment_rejected(self, cli_runner, cli_args, billed_client):
        result = cli_runner.invoke(cli, cli_args + ["payment", "add", "INV-0001", "(10)"])

        assert result.exit_code == 1
        assert "must not be negative" in result.output

    def test_payment_unknown_invoice(self, cli_runner, cli_args):
        result = cli_runner.invoke(cli, cli_args + ["payment", "add", "INV-0042", "10"])

        assert result.exit_code == 1
        assert "Error: Invoice INV-0042 not found" in result.output

    def test_remove_payment_of_missing_invoice(self, cli_runner, cli_args, tmp_path):
        orphaned = tmp_path / "orphaned.json"
        orphaned.write_text(
            json.dumps(
                {
                    "clients": [],
                    "projects": [],
                    "payments": [{"id": "pay9", "invoiceId": "gone", "amount": 5}],
                }
            )
        )
        result = cli_runner.invoke(cli, cli_args + ["import", str(orphaned)])
        assert result.exit_code == 0, result.output

        result = cli_runner.invoke(cli, cli_args + ["payment", "remove", "pay9"])

        assert result.exit_code == 0, result.output
        assert "Removed payment pay9 (invoice gone no longer exists)" in result.output

    def test_reconcile(self, cli_runner, cli_args, billed_client):
        result = cli_runner.invoke(cli, cli_args + ["reconcile"])

        assert result.exit_code == 0
        assert "Reconciled 1 invoice(s)" in result.output


class TestDataCommands:
    """Tests for export, import, sync, recover and backup commands."""

    def test_export_to_stdout(self, cli_runner, cli_args, billed_client):
        result = cli_runner.invoke(cli, cli_args + ["export"])

        assert result.exit_code == 0
        document = json.loads(result.output)
        assert document["exportedBy"] == "ProTracker Data Manager"
        assert len(document["data"]["invoices"]) == 1

    def test_export_then_import_elsewhere(self, cli_runner, cli_args, billed_client, tmp_path):
        export_file = tmp_path / "export.json"
        result = cli_runner.invoke(cli, cli_args + ["export", "--output", str(export_file)])
        assert result.exit_code == 0
        assert "Exported data to" in result.output

        other = [
            "--db-path", str(tmp_path / "other.db"),
            "--replica-path", str(tmp_path / "other-replica.db"),
        ]
        result = cli_runner.invoke(cli, other + ["import", str(export_file), "--mode", "replace"])
        assert result.exit_code == 0, result.output
        assert "Import complete (replace)" in result.output
        assert "Time entries: 2" in result.output

        result = cli_runner.invoke(cli, other + ["invoice", "list"])
        assert "INV-0001" in result.output

    def test_legacy_import_warns(self, cli_runner, cli_args, tmp_path):
        legacy = tmp_path / "legacy.json"
        legacy.write_text(json.dumps({"clients": [{"id": "c1", "name": "Old Co"}], "projects": []}))

        result = cli_runner.invoke(cli, cli_args + ["import", str(legacy)])

        assert result.exit_code == 0
        assert "Warning: Imported data from legacy format" in result.output
        assert "Clients: 1" in result.output

    def test_invalid_import(self, cli_runner, cli_args, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{}")

        result = cli_runner.invoke(cli, cli_args + ["import", str(bad)])

        assert result.exit_code == 1
        assert "Error: Invalid data format - unable to import" in result.output

    def test_sync_and_backup_list(self, cli_runner, cli_args, billed_client):
        result = cli_runner.invoke(cli, cli_args + ["sync", "--startup"])
        assert result.exit_code == 0, result.output
        assert "No replica found" in result.output

        result = cli_runner.invoke(cli, cli_args + ["backup", "list"])
        assert result.exit_code == 0
        assert "cloud_backup_" in result.output

    def test_backup_now_and_prune(self, cli_runner, cli_args, billed_client):
        for _ in range(2):
            result = cli_runner.invoke(cli, cli_args + ["backup", "now"])
            assert result.exit_code == 0
            assert "Backup complete" in result.output

        result = cli_runner.invoke(cli, cli_args + ["backup", "prune", "--keep", "1"])
        assert result.exit_code == 0
        assert "Deleted" in result.output

        result = cli_runner.invoke(cli, cli_args + ["backup", "prune", "--keep", "0"])
        assert result.exit_code == 1
        assert "Must keep at least one replica" in result.output

    def test_backup_list_empty(self, cli_runner, cli_args):
        result = cli_runner.invoke(cli, cli_args + ["backup", "list"])

        assert result.exit_code == 0
        assert "No backups found" in result.output

    def test_recover(self, cli_runner, cli_args, billed_client):
        cli_runner.invoke(cli, cli_args + ["backup", "now"])

        result = cli_runner.invoke(cli, cli_args + ["recover"])

        assert result.exit_code == 0
        assert "Recovered 1 clients, 1 projects, 2 time entries, 1 invoices" in result.output

    def test_recover_nothing(self, cli_runner, cli_args):
        result = cli_runner.invoke(cli, cli_args + ["recover"])

        assert result.exit_code == 1
        assert "No data available to recover" in result.output

    def test_help_does_not_open_databases(self, cli_runner):
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "replica" in result.output
