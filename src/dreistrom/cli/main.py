"""dreistrom CLI — main entry point."""

import logging

import typer

from ..data.database import get_db
from .commands import assets, config, invoice, report, tax, vat

app = typer.Typer(
    name="dst",
    help="Tax & allocation engine for employment, Freiberuf and Gewerbe income (Germany)",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(tax.app, name="tax", help="Income tax, Soli and Gewerbesteuer")
app.add_typer(assets.app, name="assets", help="Depreciable assets & allocation rules")
app.add_typer(vat.app, name="vat", help="Umsatzsteuer helpers")
app.add_typer(invoice.app, name="invoice", help="Gap-free invoice numbers")
app.add_typer(report.app, name="report", help="Annual tax package")
app.add_typer(config.app, name="config", help="User settings")


@app.callback()
def startup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Initialize database on first run."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)-8s %(name)s — %(message)s",
        )
    get_db()


if __name__ == "__main__":
    app()
