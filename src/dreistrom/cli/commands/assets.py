"""Asset commands — Anlagenverzeichnis, AfA schedules and allocation rules."""

from datetime import date
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...core.config import get_config
from ...core.depreciation import (
    create_asset_from_expense,
    depreciation_for_year,
    remaining_book_value,
    schedule,
    stream_totals_for_year,
)
from ...core.exceptions import ConfigurationError, DomainRuleError
from ...data.repositories.allocation_repo import AllocationRulesRepository
from ...data.repositories.assets_repo import AssetsRepository
from ..parsing import euro, fail, parse_amount, parse_date, parse_ratio

app = typer.Typer(help="Depreciable assets and allocation rules")
console = Console()
assets_repo = AssetsRepository()
rules_repo = AllocationRulesRepository()


def _ratio_label(asset) -> str:
    r = asset.ratio
    if r is None:
        return "—"
    return f"{r.freiberuf_pct}/{r.gewerbe_pct}/{r.personal_pct}"


@app.command("add")
def add(
    name: str = typer.Argument(..., help="Asset name"),
    net_cost: str = typer.Argument(..., help="Net acquisition cost in EUR"),
    acquired: str = typer.Option(..., "--acquired", "-d", help="Acquisition date YYYY-MM-DD"),
    life: int = typer.Option(..., "--life", "-l", help="Useful life in months (AfA-Tabelle)"),
    ratio: Optional[str] = typer.Option(None, "--ratio", "-r", help="Split FREIBERUF/GEWERBE/PERSONAL, e.g. 60/30/10"),
    rule: Optional[str] = typer.Option(None, "--rule", help="Name of a saved allocation rule"),
):
    """Register a capital asset. Low-value assets (GWG) are rejected."""
    if ratio and rule:
        fail("Use either --ratio or --rule, not both")

    alloc = parse_ratio(ratio) if ratio else None
    if rule:
        saved = rules_repo.get_by_name(rule)
        if saved is None:
            fail(f"Allocation rule '{rule}' not found")
        alloc = saved.ratio

    cfg = get_config()
    try:
        asset = create_asset_from_expense(
            name,
            parse_date(acquired),
            parse_amount(net_cost, "net cost"),
            life,
            ratio=alloc,
            threshold=cfg.low_value_asset_threshold,
        )
    except ConfigurationError as e:
        fail(str(e))

    if asset is None:
        console.print(
            f"[yellow]Net cost ≤ {euro(cfg.low_value_asset_threshold)}: "
            f"GWG, deduct as an expense in the year of purchase[/yellow]"
        )
        return

    asset = assets_repo.create(asset)
    console.print(
        f"[green]Added asset {asset.id}: {asset.name} "
        f"({euro(asset.net_cost)}, {asset.useful_life_months} months, "
        f"{euro(asset.annual_amount)}/year)[/green]"
    )


@app.command("list")
def list_assets(
    year: int = typer.Option(date.today().year, "--year", "-y", help="AfA year"),
):
    """List assets with AfA for a year and book value at year end."""
    assets = assets_repo.list_for_year(year)
    if not assets:
        console.print(f"[yellow]No depreciable assets in {year}[/yellow]")
        return

    table = Table(title=f"Anlagenverzeichnis {year}")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Acquired")
    table.add_column("Cost", justify="right")
    table.add_column("Months", justify="right")
    table.add_column("Split", justify="center")
    table.add_column(f"AfA {year}", justify="right")
    table.add_column("Book value 31.12.", justify="right")

    year_end = date(year, 12, 31)
    for a in assets:
        name = a.name if not a.is_disposed else f"{a.name} [dim](disposed {a.disposal_date})[/dim]"
        table.add_row(
            str(a.id),
            name,
            a.acquisition_date.isoformat(),
            euro(a.net_cost),
            str(a.useful_life_months),
            _ratio_label(a),
            euro(depreciation_for_year(a, year)),
            euro(remaining_book_value(a, year_end)),
        )
    console.print(table)

    totals = stream_totals_for_year(assets, year)
    console.print(
        f"  AfA {year}: Freiberuf {euro(totals.freiberuf)}  "
        f"Gewerbe {euro(totals.gewerbe)}  privat {euro(totals.personal)}  "
        f"[bold]total {euro(totals.total)}[/bold]"
    )


@app.command("schedule")
def show_schedule(
    asset_id: int = typer.Argument(..., help="Asset ID"),
):
    """Year-by-year AfA schedule of an asset."""
    asset = assets_repo.get_by_id(asset_id)
    if not asset:
        fail(f"Asset {asset_id} not found")

    table = Table(title=f"AfA — {asset.name}")
    table.add_column("Year")
    table.add_column("AfA", justify="right")
    table.add_column("Book value 31.12.", justify="right")
    for entry in schedule(asset):
        table.add_row(str(entry.year), euro(entry.amount), euro(entry.remaining_value))
    console.print(table)


@app.command("dispose")
def dispose_asset(
    asset_id: int = typer.Argument(..., help="Asset ID"),
    disposal_date: str = typer.Option(..., "--date", "-d", help="Disposal date YYYY-MM-DD"),
):
    """Record the sale or retirement of an asset."""
    when = parse_date(disposal_date)
    asset = assets_repo.get_by_id(asset_id)
    if not asset:
        fail(f"Asset {asset_id} not found")
    try:
        disposed = assets_repo.dispose(asset_id, when)
    except DomainRuleError as e:
        fail(str(e))
    console.print(
        f"[green]Disposed {disposed.name} on {when.isoformat()} "
        f"(AfA {when.year}: {euro(depreciation_for_year(disposed, when.year))})[/green]"
    )


@app.command("rule-add")
def rule_add(
    name: str = typer.Argument(..., help="Rule name, e.g. 'Home office'"),
    ratio: str = typer.Argument(..., help="FREIBERUF/GEWERBE/PERSONAL, e.g. 60/30/10"),
):
    """Save a named allocation rule (updates the percentages if it exists)."""
    alloc = parse_ratio(ratio)
    existing = rules_repo.get_by_name(name)
    if existing:
        rules_repo.update_ratio(existing, alloc)
        console.print(f"[green]Updated rule '{name}' → {ratio}[/green]")
    else:
        rules_repo.create(name, alloc)
        console.print(f"[green]Added rule '{name}' → {ratio}[/green]")


@app.command("rules")
def list_rules():
    """List saved allocation rules."""
    rules = rules_repo.list_all()
    if not rules:
        console.print("[yellow]No allocation rules yet. Add one with: dst assets rule-add[/yellow]")
        return
    table = Table(title="Allocation rules")
    table.add_column("Name", style="bold")
    table.add_column("Freiberuf", justify="right")
    table.add_column("Gewerbe", justify="right")
    table.add_column("Personal", justify="right")
    for r in rules:
        table.add_row(r.name, f"{r.freiberuf_pct}%", f"{r.gewerbe_pct}%", f"{r.personal_pct}%")
    console.print(table)
