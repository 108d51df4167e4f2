"""
Command-line interface for the account reconciliation tool.
"""

from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Optional
import sys

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .commands import ArchiveAccount
from .config import load_config, generate_default_config, ReconConfig
from .models.ledger import Account
from .models.reconciliation import ReconciliationSession, Staleness
from .parsers.csv_loader import CsvLoader
from .reports.excel_generator import ExcelReportGenerator
from .service import ReconciliationService
from .utils.exceptions import ConflictError, NotFoundError, ReconciliationError
from .utils.logging_config import setup_logging_from_config
from .utils.money import format_cents, to_cents

console = Console()

STALENESS_STYLES = {
    Staleness.GOOD: "green",
    Staleness.WARNING: "yellow",
    Staleness.CRITICAL: "red",
}


class CliContext:
    """Settings shared by every command."""

    def __init__(self, config: ReconConfig, state_file: Path, verbose: bool):
        self.config = config
        self.state_file = state_file
        self.verbose = verbose
        self._service: Optional[ReconciliationService] = None

    @property
    def service(self) -> ReconciliationService:
        if self._service is None:
            self._service = ReconciliationService.open(self.state_file, config=self.config)
        return self._service


def reports_errors(func):
    """Print reconciliation errors in red and exit non-zero."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        try:
            return func(*args, **kwargs)
        except ReconciliationError as e:
            console.print(f"[red]Error: {e}[/red]")
            if ctx.obj is not None and ctx.obj.verbose:
                console.print_exception()
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option(
    "-s",
    "--state",
    "state_file",
    type=click.Path(path_type=Path),
    help="Path to the state file (overrides the configured one)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[Path], state_file: Optional[Path], verbose: bool):
    """Account reconciliation against bank statements."""
    try:
        recon_config = load_config(config)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    setup_logging_from_config(recon_config.logging, verbose=verbose)

    ctx.obj = CliContext(
        config=recon_config,
        state_file=state_file or Path(recon_config.storage.state_file),
        verbose=verbose,
    )


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


@main.command("add-account")
@click.argument("account_id")
@click.option("--name", default="", help="Display name")
@click.option("--balance", default="0", help="Current balance, e.g. 500.00")
@click.option("--currency", default="USD", show_default=True)
@click.pass_obj
@reports_errors
def add_account(obj: CliContext, account_id: str, name: str, balance: str, currency: str):
    """Add an account with its current balance."""
    account = obj.service.add_account(
        Account(
            id=account_id,
            name=name,
            currency=currency.upper(),
            balance_cents=to_cents(balance),
        )
    )
    console.print(
        f"[green]Added account {account.id} "
        f"({format_cents(account.balance_cents, account.currency)})[/green]"
    )


@main.command("archive-account")
@click.argument("account_id")
@click.pass_obj
@reports_errors
def archive_account(obj: CliContext, account_id: str):
    """Archive an account so it no longer appears in the status list."""
    obj.service.dispatch(ArchiveAccount(account_id))
    console.print(f"[green]Archived account {account_id}[/green]")


@main.command("import-transactions")
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@click.option("-a", "--account", "account_id", help="Account for rows without an account column")
@click.pass_obj
@reports_errors
def import_transactions(obj: CliContext, csv_file: Path, account_id: Optional[str]):
    """
    Import transactions from a CSV export.

    CSV_FILE: Path to the transactions CSV
    """
    transactions = CsvLoader(obj.config).load_transactions(csv_file, default_account_id=account_id)

    imported = 0
    for txn in transactions:
        try:
            obj.service.record_transaction(txn)
            imported += 1
        except (ConflictError, NotFoundError) as e:
            console.print(f"[yellow]Skipped {txn.id}: {e}[/yellow]")

    console.print(f"[green]Imported {imported} of {len(transactions)} transactions[/green]")


@main.command("import-statements")
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@click.pass_obj
@reports_errors
def import_statements(obj: CliContext, csv_file: Path):
    """
    Import bank statements from a CSV file.

    CSV_FILE: Path to the statements CSV
    """
    statements = CsvLoader(obj.config).load_statements(csv_file)

    imported = 0
    for statement in statements:
        try:
            obj.service.add_statement(statement)
            imported += 1
        except ReconciliationError as e:
            console.print(f"[yellow]Skipped {statement.id}: {e}[/yellow]")

    console.print(f"[green]Imported {imported} of {len(statements)} statements[/green]")


@main.command()
@click.pass_obj
@reports_errors
def status(obj: CliContext):
    """Show reconciliation status for every active account."""
    service = obj.service
    table = Table(title="Reconciliation Status")
    table.add_column("Account", style="cyan")
    table.add_column("Balance", justify="right")
    table.add_column("Status")
    table.add_column("Last Reconciled")
    table.add_column("Unreconciled", justify="right")
    table.add_column("In Progress")

    for summary in service.summarize_accounts():
        account = service.state.accounts.get(summary.account_id)
        style = STALENESS_STYLES[summary.staleness]
        if summary.never_reconciled:
            last = "Never reconciled"
        else:
            last = f"{summary.days_since_last_reconciliation} days ago"
        table.add_row(
            account.name or account.id,
            format_cents(account.balance_cents, account.currency),
            f"[{style}]{summary.staleness.value}[/{style}]",
            last,
            str(summary.unreconciled_transaction_count),
            "yes" if summary.has_session_in_progress else "",
        )

    console.print(table)


@main.command()
@click.argument("account_id")
@click.argument("statement_id")
@click.pass_obj
@reports_errors
def start(obj: CliContext, account_id: str, statement_id: str):
    """Start reconciling ACCOUNT_ID against STATEMENT_ID."""
    session = obj.service.start_session(account_id, statement_id)
    console.print(f"[green]Started session {session.id}[/green]")
    _display_session(obj.service, session)


@main.command()
@click.argument("session_id")
@click.pass_obj
@reports_errors
def show(obj: CliContext, session_id: str):
    """Show a session and, while in progress, its candidate transactions."""
    _display_session(obj.service, obj.service.get_session(session_id))


@main.command()
@click.argument("session_id")
@click.argument("transaction_ids", nargs=-1, required=True)
@click.pass_obj
@reports_errors
def toggle(obj: CliContext, session_id: str, transaction_ids: tuple[str, ...]):
    """Mark transactions cleared, or uncleared if they already are."""
    for transaction_id in transaction_ids:
        session = obj.service.toggle_cleared(session_id, transaction_id)
        marker = "cleared" if transaction_id in session.cleared_transaction_ids else "uncleared"
        console.print(f"{transaction_id}: {marker}")

    _display_balances(obj.service, obj.service.get_session(session_id))


@main.command("set-balance")
@click.argument("session_id")
@click.argument("amount")
@click.pass_obj
@reports_errors
def set_balance(obj: CliContext, session_id: str, amount: str):
    """
    Confirm the actual ending balance of a session.

    Put "--" before a negative AMOUNT.
    """
    session = obj.service.set_actual_ending_balance(session_id, to_cents(amount))
    _display_balances(obj.service, session)


@main.command()
@click.argument("session_id")
@click.option("-n", "--notes", help="Note stored with the checkpoint")
@click.pass_obj
@reports_errors
def checkpoint(obj: CliContext, session_id: str, notes: Optional[str]):
    """Save a checkpoint of the cleared transactions."""
    saved = obj.service.save_checkpoint(session_id, notes)
    console.print(
        f"[green]Checkpoint {saved.id}: "
        f"{len(saved.cleared_transaction_ids)} cleared transactions[/green]"
    )


@main.command()
@click.argument("session_id")
@click.option(
    "--post-adjustment",
    is_flag=True,
    help="Post an adjustment transaction for a nonzero difference",
)
@click.pass_obj
@reports_errors
def complete(obj: CliContext, session_id: str, post_adjustment: bool):
    """Complete a session and reconcile its cleared transactions."""
    session = obj.service.complete(session_id, post_adjustment=post_adjustment)
    currency = obj.service.state.accounts.get(session.account_id).currency

    if session.is_balanced:
        console.print(f"[green]Session {session.id} completed and balanced[/green]")
    else:
        console.print(
            f"[yellow]Session {session.id} completed with a difference of "
            f"{format_cents(session.difference_cents, currency)}[/yellow]"
        )
    if session.adjustment_transaction_id:
        console.print(f"Adjustment transaction: {session.adjustment_transaction_id}")


@main.command()
@click.argument("session_id")
@click.pass_obj
@reports_errors
def abandon(obj: CliContext, session_id: str):
    """Abandon a session without reconciling anything."""
    session = obj.service.abandon(session_id)
    console.print(f"[yellow]Session {session.id} abandoned[/yellow]")


@main.command()
@click.argument("account_id")
@click.pass_obj
@reports_errors
def history(obj: CliContext, account_id: str):
    """List finished sessions of an account, newest first."""
    account = obj.service.state.accounts.get(account_id)
    sessions = obj.service.history(account_id)

    table = Table(title=f"Reconciliation History: {account.name or account.id}")
    table.add_column("Date")
    table.add_column("Session")
    table.add_column("Statement")
    table.add_column("Status")
    table.add_column("Cleared", justify="right")
    table.add_column("Difference", justify="right")

    for session in sessions:
        difference = (
            format_cents(session.difference_cents, account.currency)
            if session.difference_cents is not None
            else "-"
        )
        table.add_row(
            session.sort_date.strftime("%Y-%m-%d"),
            session.id[:8],
            session.statement_id,
            session.status.value,
            str(len(session.cleared_transaction_ids)),
            difference,
        )

    console.print(table)
    if not sessions:
        console.print("No finished sessions yet")


@main.command()
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.pass_obj
@reports_errors
def export(obj: CliContext, output: Optional[Path]):
    """Export account status and session history to Excel."""
    if output is None:
        now = datetime.now()
        output = Path(
            obj.config.output.excel.filename_template.format(
                date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
            )
        )

    service = obj.service
    report_path = ExcelReportGenerator(obj.config).generate_report(
        accounts=service.state.accounts.list_all(),
        summaries=service.summarize_accounts(),
        sessions=service.state.all_sessions(),
        output_path=output,
    )
    console.print(f"[green]Report generated: {report_path}[/green]")


def _display_session(service: ReconciliationService, session: ReconciliationSession) -> None:
    """Display a session with its candidate transactions."""
    currency = service.state.accounts.get(session.account_id).currency
    console.print(
        f"Session {session.id} ({session.status.value}) for account {session.account_id}, "
        f"statement {session.statement_id}"
    )

    if session.is_in_progress:
        table = Table(title="Transactions in statement period")
        table.add_column("Cleared")
        table.add_column("ID")
        table.add_column("Date")
        table.add_column("Amount", justify="right")
        table.add_column("Description")

        for txn in service.candidate_transactions(session.id):
            table.add_row(
                "x" if txn.id in session.cleared_transaction_ids else "",
                txn.id,
                str(txn.date),
                format_cents(txn.amount_cents, currency),
                txn.description[:40] + "..." if len(txn.description) > 40 else txn.description,
            )
        console.print(table)

    _display_balances(service, session)


def _display_balances(service: ReconciliationService, session: ReconciliationSession) -> None:
    """Display the balance figures of a session."""
    currency = service.state.accounts.get(session.account_id).currency

    table = Table(title="Balances")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Starting Balance", format_cents(session.starting_balance_cents, currency))
    table.add_row("Statement Ending Balance", format_cents(session.ending_balance_cents, currency))
    table.add_row("Computed Balance", format_cents(session.computed_balance_cents, currency))
    if session.actual_ending_balance_cents is not None:
        table.add_row(
            "Actual Ending Balance",
            format_cents(session.actual_ending_balance_cents, currency),
        )

    if session.is_in_progress:
        difference = service.preview(session.id).difference_cents
    else:
        difference = session.difference_cents
    if difference is not None:
        style = "green" if difference == 0 else "red"
        table.add_row("Difference", f"[{style}]{format_cents(difference, currency)}[/{style}]")

    console.print(table)


if __name__ == "__main__":
    main()
