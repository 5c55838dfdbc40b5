"""Configuration commands — dst config show / set."""

import dataclasses
from decimal import Decimal
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...core.config import get_config, save_config
from ..parsing import fail, parse_amount

app = typer.Typer(help="User settings (config.json)")
console = Console()


@app.command("show")
def show():
    """Show the current settings."""
    cfg = get_config()
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Setting", style="dim")
    table.add_column("Value", style="bold")
    for f in dataclasses.fields(cfg):
        value = getattr(cfg, f.name)
        if isinstance(value, bool):
            value = "yes" if value else "no"
        table.add_row(f.name, str(value))
    console.print(Panel.fit(table, title="dreistrom settings", border_style="cyan"))


@app.command("set")
def set_values(
    hebesatz: Optional[int] = typer.Option(None, "--hebesatz", help="Gewerbesteuer-Hebesatz of the municipality"),
    reserve_rate: Optional[str] = typer.Option(None, "--reserve-rate", help="Tax reserve rate in percent"),
    kleinunternehmer: Optional[bool] = typer.Option(
        None, "--kleinunternehmer/--regelbesteuerung", help="§ 19 UStG election"
    ),
    gwg_threshold: Optional[str] = typer.Option(None, "--gwg-threshold", help="GWG limit (net EUR)"),
    name: Optional[str] = typer.Option(None, "--name", help="Your name"),
):
    """Change one or more settings."""
    cfg = get_config()
    changes: dict = {}
    if hebesatz is not None:
        if hebesatz < 200:
            fail("Hebesatz must be at least 200 % (§ 16 Abs. 4 GewStG)")
        changes["hebesatz"] = hebesatz
    if reserve_rate is not None:
        rate = parse_amount(reserve_rate, "reserve rate")
        if not Decimal("0") <= rate <= Decimal("100"):
            fail("Reserve rate must be between 0 and 100")
        changes["tax_reserve_rate"] = rate
    if kleinunternehmer is not None:
        changes["kleinunternehmer"] = kleinunternehmer
    if gwg_threshold is not None:
        changes["low_value_asset_threshold"] = parse_amount(gwg_threshold, "GWG threshold")
    if name is not None:
        changes["user_name"] = name

    if not changes:
        console.print("[yellow]Nothing to change. See: dst config set --help[/yellow]")
        return

    save_config(dataclasses.replace(cfg, **changes))
    for key, value in changes.items():
        console.print(f"  [green]✓[/green] {key} = {value}")
