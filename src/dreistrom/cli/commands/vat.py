"""VAT commands — gross/net conversion, invoice treatment and Kleinunternehmer status."""

from datetime import date
from enum import Enum
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...core.config import get_config
from ...core.models import ClientType
from ...core.vat import (
    STANDARD_RATE,
    determine_vat_treatment,
    extract_vat,
    gross_from_net,
    is_zm_reportable,
    kleinunternehmer_status,
    net_from_gross,
    vat_notice,
)
from ..parsing import euro, parse_amount

app = typer.Typer(help="Umsatzsteuer helpers")
console = Console()


class AmountKind(str, Enum):
    GROSS = "gross"
    NET = "net"


@app.command("convert")
def convert(
    amount: str = typer.Argument(..., help="Amount in EUR"),
    rate: str = typer.Option(str(STANDARD_RATE), "--rate", "-r", help="VAT rate in percent (19 or 7)"),
    kind: AmountKind = typer.Option(AmountKind.GROSS, "--from", help="Whether AMOUNT is gross or net"),
):
    """Split an amount into net, VAT and gross."""
    value = parse_amount(amount)
    r = parse_amount(rate, "rate")
    if kind is AmountKind.GROSS:
        gross = value
        net = net_from_gross(value, r)
        vat = extract_vat(value, r)
    else:
        net = value
        gross = gross_from_net(value, r)
        vat = gross - net

    table = Table(title=f"USt {r} %", show_header=False)
    table.add_column("Item")
    table.add_column("EUR", justify="right")
    table.add_row("Net", euro(net))
    table.add_row("VAT", euro(vat))
    table.add_row("[bold]Gross[/bold]", f"[bold]{euro(gross)}[/bold]")
    console.print(table)


@app.command("kleinunternehmer")
def kleinunternehmer(
    revenue: str = typer.Argument(..., help="Self-employed revenue so far this year"),
    year: int = typer.Option(date.today().year, "--year", "-y", help="Year"),
):
    """Revenue against the § 19 UStG Kleinunternehmer limits."""
    cfg = get_config()
    status = kleinunternehmer_status(
        parse_amount(revenue, "revenue"),
        year,
        date.today(),
        prior_year_limit=cfg.kleinunternehmer_prior_year_limit,
        current_year_limit=cfg.kleinunternehmer_current_year_limit,
    )
    for label, value, limit, ratio, exceeded in (
        ("Revenue", status.current_revenue, status.current_year_limit,
         status.current_ratio, status.current_exceeded),
        ("Projected", status.projected_revenue, status.projected_year_limit,
         status.projected_ratio, status.projected_exceeded),
    ):
        color = "red" if exceeded else "green"
        console.print(
            f"  {label:<10} {euro(value):>14} of {euro(limit):>12}  "
            f"[{color}]{ratio * 100:.1f}%[/{color}]"
        )
    if status.current_exceeded or status.projected_exceeded:
        console.print("  [yellow]Kleinunternehmer status at risk — regular VAT applies[/yellow]")


@app.command("treatment")
def treatment(
    country: str = typer.Argument(..., help="Recipient country (ISO code, e.g. DE, AT, US)"),
    client_type: ClientType = typer.Option(ClientType.B2C, "--type", "-t", help="b2b or b2c"),
    ust_id: Optional[str] = typer.Option(None, "--ust-id", help="Recipient's USt-IdNr"),
    name: str = typer.Option("", "--name", help="Recipient name"),
):
    """VAT treatment and invoice notice for a recipient."""
    result = determine_vat_treatment(country, client_type, ust_id)
    console.print(f"  Treatment: [bold]{result.value}[/bold]")
    notice = vat_notice(result)
    if notice:
        console.print(f"  Invoice notice: {notice}")
    if is_zm_reportable(country, result, name):
        console.print("  [yellow]Report in the Zusammenfassende Meldung[/yellow]")
