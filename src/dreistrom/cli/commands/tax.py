"""Tax commands — income tax, Soli, trade tax, reserve, prepayments and thresholds."""

from datetime import date
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...core.config import get_config
from ...core.exceptions import MissingTaxYearError
from ...core.tax import (
    TradeTaxParameters,
    abfaerbung_status,
    assess_income_tax,
    compute_solidarity_surcharge,
    compute_trade_tax,
    check_deviation,
    get_tax_year_parameters,
    mandatory_filing_status,
    recommend_home_office,
    recommend_tax_reserve,
    trade_tax_threshold_status,
    vorauszahlung_schedule,
)
from ..parsing import euro, fail, parse_amount

app = typer.Typer(help="Income tax, Soli and Gewerbesteuer")
console = Console()


@app.command("income")
def income(
    year: int = typer.Option(date.today().year, "--year", "-y", help="Tax year"),
    employment: str = typer.Option("0", "--employment", "-e", help="Gross wages (§ 19)"),
    freiberuf: str = typer.Option("0", "--freiberuf", "-f", help="Freiberuf revenue (§ 18)"),
    gewerbe: str = typer.Option("0", "--gewerbe", "-g", help="Gewerbe revenue (§ 15)"),
    freiberuf_expenses: str = typer.Option("0", "--freiberuf-expenses", help="Freiberuf expenses incl. AfA"),
    gewerbe_expenses: str = typer.Option("0", "--gewerbe-expenses", help="Gewerbe expenses incl. AfA"),
):
    """Assess income tax and Soli across all three income streams."""
    try:
        result = assess_income_tax(
            year,
            employment_income=parse_amount(employment, "employment"),
            freiberuf_income=parse_amount(freiberuf, "freiberuf"),
            gewerbe_income=parse_amount(gewerbe, "gewerbe"),
            freiberuf_expenses=parse_amount(freiberuf_expenses, "freiberuf expenses"),
            gewerbe_expenses=parse_amount(gewerbe_expenses, "gewerbe expenses"),
        )
    except MissingTaxYearError as e:
        fail(str(e))

    d = result.deductions
    table = Table(title=f"Einkommensteuer {year}", show_header=False)
    table.add_column("Item")
    table.add_column("EUR", justify="right")
    table.add_row("Gross income", euro(result.total_gross_income))
    table.add_row("  Business expenses Freiberuf", f"−{euro(d.business_expenses_freiberuf)}")
    table.add_row("  Business expenses Gewerbe", f"−{euro(d.business_expenses_gewerbe)}")
    if d.werbungskostenpauschale > 0:
        table.add_row("  Werbungskostenpauschale", f"−{euro(d.werbungskostenpauschale)}")
    table.add_row("  Sonderausgabenpauschale", f"−{euro(d.sonderausgabenpauschale)}")
    table.add_row("[bold]Zu versteuerndes Einkommen[/bold]", f"[bold]{euro(result.taxable_income)}[/bold]")
    table.add_row("Einkommensteuer", euro(result.income_tax))
    table.add_row("Solidaritätszuschlag", euro(result.solidaritaetszuschlag))
    table.add_row("[bold]Total tax[/bold]", f"[bold]{euro(result.total_tax)}[/bold]")
    table.add_row("Marginal rate", f"{result.marginal_rate}%")
    table.add_row("Effective rate", f"{result.effective_rate}%")
    console.print(table)


@app.command("soli")
def soli(
    income_tax: str = typer.Argument(..., help="Assessed income tax in EUR"),
    year: int = typer.Option(date.today().year, "--year", "-y", help="Tax year"),
):
    """Solidaritätszuschlag on an income tax amount."""
    try:
        params = get_tax_year_parameters(year)
    except MissingTaxYearError as e:
        fail(str(e))
    amount = compute_solidarity_surcharge(params, parse_amount(income_tax, "income tax"))
    console.print(f"  Solidaritätszuschlag {year}: [bold]{euro(amount)}[/bold]")
    if amount == 0:
        console.print(f"  [dim]Below the Freigrenze of {euro(params.soli_exemption)}[/dim]")


@app.command("trade")
def trade(
    revenue: str = typer.Argument(..., help="Gewerbe revenue"),
    expenses: str = typer.Option("0", "--expenses", help="Allocated Gewerbe expenses incl. AfA"),
    income_tax: str = typer.Option("0", "--income-tax", help="Income tax (caps the § 35 credit)"),
    hebesatz: Optional[int] = typer.Option(None, "--hebesatz", help="Override the configured Hebesatz"),
):
    """Gewerbesteuer with the § 35 EStG credit."""
    params = TradeTaxParameters.from_config()
    if hebesatz is not None:
        params = TradeTaxParameters(
            hebesatz=hebesatz,
            allowance=params.allowance,
            steuermesszahl=params.steuermesszahl,
        )
    rev = parse_amount(revenue, "revenue")
    exp = parse_amount(expenses, "expenses")
    result = compute_trade_tax(rev, exp, parse_amount(income_tax, "income tax"), params)
    status = trade_tax_threshold_status(rev, exp, params.allowance)

    table = Table(title=f"Gewerbesteuer (Hebesatz {result.hebesatz} %)", show_header=False)
    table.add_column("Item")
    table.add_column("EUR", justify="right")
    table.add_row("Gewerbeertrag", euro(result.profit))
    table.add_row("  Freibetrag", f"−{euro(result.allowance)}")
    table.add_row("Taxable", euro(result.taxable_profit))
    table.add_row("Steuermessbetrag", euro(result.assessment_base))
    table.add_row("Gewerbesteuer", euro(result.trade_tax))
    table.add_row("§ 35 Anrechnung", f"−{euro(result.credit)}")
    color = "red" if result.net_burden > 0 else "green"
    table.add_row("[bold]Net burden[/bold]", f"[{color}]{euro(result.net_burden)}[/{color}]")
    console.print(table)

    if status.bilanzierungspflicht:
        console.print("  [yellow]§ 141 AO: bookkeeping obligation thresholds exceeded[/yellow]")


@app.command("reserve")
def reserve(
    net_profit: str = typer.Argument(..., help="Year-to-date self-employed profit"),
    year: int = typer.Option(date.today().year, "--year", "-y", help="Tax year"),
    reserved: str = typer.Option("0", "--reserved", help="Already set aside this year"),
):
    """Recommend a monthly transfer to the tax reserve."""
    rec = recommend_tax_reserve(
        parse_amount(net_profit, "net profit"),
        year,
        date.today(),
        rate=get_config().tax_reserve_rate,
        already_reserved=parse_amount(reserved, "reserved"),
    )
    console.print(f"  Projected profit {year}:  {euro(rec.projected_annual_profit)}")
    console.print(f"  Reserve ({rec.reserve_rate} %):      {euro(rec.annual_reserve)}")
    console.print(f"  Still to reserve:        {euro(rec.remaining)}")
    console.print(f"  Per month ({rec.months_remaining} left):  [bold]{euro(rec.monthly_reserve)}[/bold]")


@app.command("prepayments")
def prepayments(
    assessed_tax: str = typer.Argument(..., help="Annual tax from the last Bescheid"),
    year: int = typer.Option(date.today().year, "--year", "-y", help="Tax year"),
    income_so_far: Optional[str] = typer.Option(
        None, "--income-so-far", help="Year-to-date income, to check for an Anpassungsantrag"
    ),
):
    """Quarterly Vorauszahlungen (§ 37 EStG)."""
    basis = parse_amount(assessed_tax, "assessed tax")
    sched = vorauszahlung_schedule(year, basis)
    today = date.today()

    table = Table(title=f"Vorauszahlungen {year}")
    table.add_column("Quarter")
    table.add_column("Due")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    for p in sched.payments:
        status = p.status(today)
        color = {"paid": "green", "overdue": "red"}.get(status, "dim")
        table.add_row(f"Q{p.quarter}", p.due_date.isoformat(), euro(p.amount), f"[{color}]{status}[/{color}]")
    console.print(table)

    if income_so_far is not None:
        suggestion = check_deviation(parse_amount(income_so_far, "income"), basis, year, today)
        if suggestion.recommended:
            console.print(
                f"  [yellow]Projected income deviates by {suggestion.deviation_pct} % — "
                f"consider an Anpassungsantrag ({euro(suggestion.suggested_quarterly)}/quarter)[/yellow]"
            )


@app.command("thresholds")
def thresholds(
    freiberuf: str = typer.Option("0", "--freiberuf", "-f", help="Freiberuf revenue"),
    gewerbe: str = typer.Option("0", "--gewerbe", "-g", help="Gewerbe revenue"),
    year: int = typer.Option(date.today().year, "--year", "-y", help="Tax year"),
):
    """Abfärbung and mandatory filing checks for the self-employed streams."""
    fb = parse_amount(freiberuf, "Freiberuf revenue")
    gw = parse_amount(gewerbe, "Gewerbe revenue")
    abf = abfaerbung_status(gw, fb + gw, year)
    filing = mandatory_filing_status(year, fb, gw)

    color = "red" if abf.threshold_exceeded else "green"
    console.print(
        f"  Abfärbung:  Gewerbe {euro(abf.gewerbe_revenue)} = "
        f"[{color}]{abf.ratio * 100:.2f}%[/{color}] of {euro(abf.self_employed_revenue)}"
    )
    if abf.threshold_exceeded:
        console.print("  [yellow]Gewerbe share above 3 % and 24,500 € — Freiberuf income may become gewerblich[/yellow]")
    verdict = "[bold]required[/bold]" if filing.filing_required else "not required"
    console.print(
        f"  § 46 EStG:  Nebeneinkünfte {euro(filing.nebeneinkuenfte)} "
        f"(limit {euro(filing.threshold)}) → tax return {verdict}"
    )


@app.command("home-office")
def home_office(
    rent: str = typer.Option("0", "--rent", help="Monthly rent"),
    utilities: str = typer.Option("0", "--utilities", help="Monthly Nebenkosten"),
    total_area: str = typer.Option(..., "--total-area", help="Living area in m²"),
    office_area: str = typer.Option("0", "--office-area", help="Office room area in m²"),
    months: int = typer.Option(12, "--months", help="Months the office was used"),
    days: int = typer.Option(0, "--days", help="Days worked from home"),
):
    """Compare the Arbeitszimmer deduction with the Homeoffice-Pauschale."""
    try:
        rec = recommend_home_office(
            parse_amount(rent, "rent"),
            parse_amount(utilities, "utilities"),
            parse_amount(total_area, "total area"),
            parse_amount(office_area, "office area"),
            months,
            days,
        )
    except ValueError as e:
        fail(str(e))

    table = Table(title="Home office deduction")
    table.add_column("Method")
    table.add_column("Deduction", justify="right")
    table.add_column("Details", style="dim")
    for result in (rec.arbeitszimmer, rec.pauschale):
        label = result.method.value
        if result.method is rec.recommended:
            label = f"[bold green]{label} ✓[/bold green]"
        table.add_row(label, euro(result.deduction), result.details)
    console.print(table)
