"""Annual tax package (Einkommensteuererklärung) assembly.

Combines all calculators into one read-only snapshot for a tax year:

  EÜR per self-employed stream    income − (direct expenses + AfA)
  Income tax + Soli               § 32a EStG on all three streams
  Gewerbesteuer + § 35 credit     on the Gewerbe EÜR profit
  Anlage N                        Lohnsteuer/Soli ≈ employment share of gross
  Anlage S / Anlage G             from the EÜR results
  Anlage Vorsorgeaufwand          employee social insurance shares

Inputs are aggregated minor-unit sums from the ledgers plus the list of
depreciable assets; nothing is persisted.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from .depreciation import stream_totals_for_year
from .models import (
    AllocationRatio,
    AnlageG,
    AnlageN,
    AnlageS,
    AnlageVorsorgeaufwand,
    AnnualTaxPackage,
    DepreciableAsset,
    EuerResult,
    IncomeStream,
    TaxCalculationResult,
)
from .money import ZERO, Amount, cents_to_euros, quantize_cents, to_decimal
from .tax.gewerbesteuer import TradeTaxParameters, compute_trade_tax
from .tax.income_tax import calculate_income_tax
from .tax.params import TaxYearParameters

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

#: Employee shares of the statutory social insurance contributions
KV_RATE = Decimal("0.073")   # Krankenversicherung 14.6 % / 2
PV_RATE = Decimal("0.017")   # Pflegeversicherung 3.4 % / 2
RV_RATE = Decimal("0.093")   # Rentenversicherung 18.6 % / 2
AV_RATE = Decimal("0.013")   # Arbeitslosenversicherung 2.6 % / 2

RATIO_PLACES = Decimal("0.000001")


@dataclass
class AnnualInputs:
    """Aggregated ledger sums for one tax year, in cents."""
    employment_income_cents: int = 0
    freiberuf_income_cents: int = 0
    gewerbe_income_cents: int = 0
    freiberuf_expenses_cents: int = 0
    gewerbe_expenses_cents: int = 0
    assets: list[DepreciableAsset] = field(default_factory=list)
    #: Employment income from social insurance records; falls back to
    #: employment_income_cents when None
    social_insurance_basis_cents: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnnualInputs":
        """Build inputs from a JSON document (as used by `dst report annual`)."""
        assets = []
        for a in data.get("assets", []):
            ratio = a.get("ratio")
            assets.append(DepreciableAsset(
                name=a["name"],
                acquisition_date=date.fromisoformat(a["acquisition_date"]),
                net_cost=to_decimal(a["net_cost"]),
                useful_life_months=int(a["useful_life_months"]),
                ratio=AllocationRatio(*ratio) if ratio else None,
                disposal_date=(
                    date.fromisoformat(a["disposal_date"]) if a.get("disposal_date") else None
                ),
            ))
        return cls(
            employment_income_cents=int(data.get("employment_income_cents", 0)),
            freiberuf_income_cents=int(data.get("freiberuf_income_cents", 0)),
            gewerbe_income_cents=int(data.get("gewerbe_income_cents", 0)),
            freiberuf_expenses_cents=int(data.get("freiberuf_expenses_cents", 0)),
            gewerbe_expenses_cents=int(data.get("gewerbe_expenses_cents", 0)),
            assets=assets,
            social_insurance_basis_cents=data.get("social_insurance_basis_cents"),
        )


def build_euer(
    year: int,
    stream: IncomeStream,
    income: Amount,
    direct_expenses: Amount,
    depreciation: Amount,
) -> EuerResult:
    """Einnahmen-Überschuss-Rechnung for one stream. Losses stay negative."""
    total_income = quantize_cents(to_decimal(income))
    direct = quantize_cents(to_decimal(direct_expenses))
    afa = quantize_cents(to_decimal(depreciation))
    total_expenses = direct + afa
    return EuerResult(
        tax_year=year,
        stream=stream,
        total_income=total_income,
        direct_expenses=direct,
        depreciation=afa,
        total_expenses=total_expenses,
        profit=total_income - total_expenses,
    )


def _build_anlage_n(calc: TaxCalculationResult) -> AnlageN:
    brutto = calc.employment_income
    lohnsteuer = soli = ZERO
    if calc.total_gross_income > 0 and brutto > 0:
        share = (brutto / calc.total_gross_income).quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)
        lohnsteuer = quantize_cents(calc.income_tax * share)
        soli = quantize_cents(calc.solidaritaetszuschlag * share)
    return AnlageN(
        bruttoarbeitslohn=brutto,
        lohnsteuer=lohnsteuer,
        solidaritaetszuschlag=soli,
        werbungskostenpauschale=calc.deductions.werbungskostenpauschale,
    )


def _build_vorsorgeaufwand(basis: Decimal) -> AnlageVorsorgeaufwand:
    kv = quantize_cents(basis * KV_RATE)
    pv = quantize_cents(basis * PV_RATE)
    rv = quantize_cents(basis * RV_RATE)
    av = quantize_cents(basis * AV_RATE)
    return AnlageVorsorgeaufwand(
        krankenversicherung=kv,
        pflegeversicherung=pv,
        rentenversicherung=rv,
        arbeitslosenversicherung=av,
        gesamt=kv + pv + rv + av,
    )


def assemble_annual_package(
    inputs: AnnualInputs,
    params: TaxYearParameters,
    trade_params: Optional[TradeTaxParameters] = None,
) -> AnnualTaxPackage:
    """Assemble the full annual tax return package for `params.year`.

    Args:
        inputs: Aggregated income and allocated expense sums plus assets.
        params: Statutory constants for the tax year.
        trade_params: Gewerbesteuer parameters; read from config.json if
            not provided.
    """
    year = params.year
    logger.debug("Assembling annual tax package for %d", year)

    depreciation = stream_totals_for_year(inputs.assets, year)

    euer_freiberuf = build_euer(
        year,
        IncomeStream.FREIBERUF,
        cents_to_euros(inputs.freiberuf_income_cents),
        cents_to_euros(inputs.freiberuf_expenses_cents),
        depreciation.freiberuf,
    )
    euer_gewerbe = build_euer(
        year,
        IncomeStream.GEWERBE,
        cents_to_euros(inputs.gewerbe_income_cents),
        cents_to_euros(inputs.gewerbe_expenses_cents),
        depreciation.gewerbe,
    )

    calc = calculate_income_tax(
        params,
        employment_income=cents_to_euros(inputs.employment_income_cents),
        freiberuf_income=euer_freiberuf.total_income,
        gewerbe_income=euer_gewerbe.total_income,
        freiberuf_expenses=euer_freiberuf.total_expenses,
        gewerbe_expenses=euer_gewerbe.total_expenses,
    )

    trade_tax = compute_trade_tax(
        euer_gewerbe.total_income,
        euer_gewerbe.total_expenses,
        calc.income_tax,
        trade_params,
    )

    anlage_s = AnlageS(
        einnahmen=euer_freiberuf.total_income,
        betriebsausgaben=euer_freiberuf.direct_expenses,
        afa=euer_freiberuf.depreciation,
        gewinn=euer_freiberuf.profit,
    )
    anlage_g = AnlageG(
        einnahmen=euer_gewerbe.total_income,
        betriebsausgaben=euer_gewerbe.direct_expenses,
        afa=euer_gewerbe.depreciation,
        gewinn=euer_gewerbe.profit,
        gewerbesteuer=trade_tax.trade_tax,
        paragraph35_anrechnung=trade_tax.credit,
    )

    if inputs.social_insurance_basis_cents is not None:
        basis = cents_to_euros(inputs.social_insurance_basis_cents)
    else:
        basis = calc.employment_income

    package = AnnualTaxPackage(
        tax_year=year,
        anlage_n=_build_anlage_n(calc),
        anlage_s=anlage_s,
        anlage_g=anlage_g,
        euer_freiberuf=euer_freiberuf,
        euer_gewerbe=euer_gewerbe,
        vorsorgeaufwand=_build_vorsorgeaufwand(basis),
        tax_calculation=calc,
        trade_tax=trade_tax,
        depreciation=depreciation,
    )
    logger.info(
        "Annual package %d: income tax %s, trade tax %s",
        year, calc.income_tax, trade_tax.trade_tax,
    )
    return package
