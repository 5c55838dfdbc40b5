"""Report commands — annual tax package."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...core.annual import AnnualInputs, assemble_annual_package
from ...core.exceptions import DreiStromError
from ...core.tax import TradeTaxParameters, get_tax_year_parameters
from ...data.repositories.assets_repo import AssetsRepository
from ..parsing import euro, fail

app = typer.Typer(help="Annual reports")
console = Console()
assets_repo = AssetsRepository()


def _section(title: str, rows: list[tuple[str, object]]) -> Table:
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column("Field")
    table.add_column("EUR", justify="right")
    for label, value in rows:
        table.add_row(label, euro(value))
    return table


@app.command("annual")
def annual(
    input_file: Path = typer.Argument(..., help="JSON file with aggregated sums in cents"),
    year: int = typer.Option(..., "--year", "-y", help="Tax year"),
    db_assets: bool = typer.Option(False, "--db-assets", help="Add assets from the database"),
):
    """Assemble the Einkommensteuererklärung package for a year.

    The input file holds cent sums, e.g.
    {"employment_income_cents": 4500000, "freiberuf_income_cents": 3000000, ...}
    """
    if not input_file.exists():
        fail(f"File not found: {input_file}")
    try:
        data = json.loads(input_file.read_text(encoding="utf-8"))
        inputs = AnnualInputs.from_dict(data)
    except (ValueError, KeyError, TypeError) as e:
        fail(f"Invalid input file: {e}")
    except DreiStromError as e:
        fail(str(e))

    if db_assets:
        inputs.assets.extend(assets_repo.list_for_year(year))

    try:
        package = assemble_annual_package(
            inputs,
            get_tax_year_parameters(year),
            TradeTaxParameters.from_config(),
        )
    except DreiStromError as e:
        fail(str(e))

    calc = package.tax_calculation
    n, s, g, v = package.anlage_n, package.anlage_s, package.anlage_g, package.vorsorgeaufwand

    console.print(f"\n[bold]Einkommensteuererklärung {year}[/bold]\n")
    if n.bruttoarbeitslohn > 0:
        console.print(_section("Anlage N", [
            ("Bruttoarbeitslohn", n.bruttoarbeitslohn),
            ("Lohnsteuer (approx.)", n.lohnsteuer),
            ("Solidaritätszuschlag (approx.)", n.solidaritaetszuschlag),
            ("Werbungskostenpauschale", n.werbungskostenpauschale),
        ]))
    console.print(_section("Anlage S (Freiberuf)", [
        ("Einnahmen", s.einnahmen),
        ("Betriebsausgaben", s.betriebsausgaben),
        ("AfA", s.afa),
        ("Gewinn", s.gewinn),
    ]))
    console.print(_section("Anlage G (Gewerbe)", [
        ("Einnahmen", g.einnahmen),
        ("Betriebsausgaben", g.betriebsausgaben),
        ("AfA", g.afa),
        ("Gewinn", g.gewinn),
        ("Gewerbesteuer", g.gewerbesteuer),
        ("§ 35 Anrechnung", g.paragraph35_anrechnung),
    ]))
    console.print(_section("Anlage Vorsorgeaufwand", [
        ("Krankenversicherung", v.krankenversicherung),
        ("Pflegeversicherung", v.pflegeversicherung),
        ("Rentenversicherung", v.rentenversicherung),
        ("Arbeitslosenversicherung", v.arbeitslosenversicherung),
        ("Gesamt", v.gesamt),
    ]))
    console.print(_section("Steuerberechnung", [
        ("Zu versteuerndes Einkommen", calc.taxable_income),
        ("Einkommensteuer", calc.income_tax),
        ("Solidaritätszuschlag", calc.solidaritaetszuschlag),
        ("Gewerbesteuer (net of § 35)", package.trade_tax.net_burden),
    ]))
    console.print(
        f"  Marginal rate {calc.marginal_rate}%   effective rate {calc.effective_rate}%\n"
    )
