"""Argument parsing shared by the dst commands."""

from datetime import date
from decimal import Decimal, InvalidOperation

import typer
from rich.console import Console

from ..core.exceptions import InvalidAllocationError
from ..core.models import AllocationRatio

console = Console()


def fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def parse_amount(raw: str, label: str = "amount") -> Decimal:
    try:
        return Decimal(raw.replace(",", ""))
    except InvalidOperation:
        fail(f"Invalid number format for {label}: {raw}")


def parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        fail("Invalid date format. Use YYYY-MM-DD")


def parse_ratio(raw: str) -> AllocationRatio:
    """Parse "60/30/10" (Freiberuf / Gewerbe / personal)."""
    parts = raw.split("/")
    if len(parts) != 3:
        fail("Ratio must look like FREIBERUF/GEWERBE/PERSONAL, e.g. 60/30/10")
    try:
        return AllocationRatio(*(int(p) for p in parts))
    except ValueError:
        fail(f"Ratio parts must be whole percentages: {raw}")
    except InvalidAllocationError as e:
        fail(str(e))


def euro(value: Decimal) -> str:
    return f"€{value:,.2f}"
