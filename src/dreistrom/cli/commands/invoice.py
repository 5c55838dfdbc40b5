"""Invoice number commands."""

from datetime import date

import typer
from rich.console import Console
from rich.table import Table

from ...core.exceptions import SequenceLockError, UnsupportedStreamError
from ...core.invoicing import InvoiceNumberGenerator, format_invoice_number
from ...core.models import IncomeStream
from ...data.repositories.sequence_repo import SqliteCounterStore
from ..parsing import fail

app = typer.Typer(help="Gap-free invoice numbers")
console = Console()


def _generator() -> InvoiceNumberGenerator:
    return InvoiceNumberGenerator(SqliteCounterStore())


@app.command("next")
def next_number(
    stream: IncomeStream = typer.Argument(..., help="freiberuf or gewerbe"),
    year: int = typer.Option(date.today().year, "--year", "-y", help="Fiscal year"),
):
    """Reserve the next invoice number."""
    try:
        number = _generator().next_invoice_number(stream, year)
    except UnsupportedStreamError as e:
        fail(str(e))
    except SequenceLockError as e:
        fail(f"{e} — try again")
    console.print(f"[bold green]{number}[/bold green]")


@app.command("peek")
def peek(
    stream: IncomeStream = typer.Argument(..., help="freiberuf or gewerbe"),
    year: int = typer.Option(date.today().year, "--year", "-y", help="Fiscal year"),
):
    """Show the next invoice number without reserving it."""
    try:
        counter = _generator().peek_or_create(stream, year)
    except UnsupportedStreamError as e:
        fail(str(e))
    except SequenceLockError as e:
        fail(f"{e} — try again")
    console.print(
        f"  Issued so far: {counter.last_issued}   "
        f"next: [bold]{format_invoice_number(counter.stream, year, counter.next_ordinal)}[/bold]"
    )


@app.command("list")
def list_counters():
    """List all invoice counters."""
    counters = SqliteCounterStore().list_all()
    if not counters:
        console.print("[yellow]No invoice numbers issued yet[/yellow]")
        return
    table = Table(title="Invoice counters")
    table.add_column("Year")
    table.add_column("Stream", style="bold")
    table.add_column("Issued", justify="right")
    table.add_column("Last number")
    for c in counters:
        last = format_invoice_number(c.stream, c.fiscal_year, c.last_issued) if c.last_issued else "—"
        table.add_row(str(c.fiscal_year), c.stream.value, str(c.last_issued), last)
    console.print(table)
