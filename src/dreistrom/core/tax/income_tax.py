"""Progressive income tax (Einkommensteuer) per § 32a EStG.

The tariff is a piecewise function over the taxable income (zvE) with five
zones; constants come from TaxYearParameters. Each zone's formula is
truncated to full euros (§ 32a Abs. 1 Satz 6 EStG) and reported with two
decimal places.

Deductions applied by calculate_income_tax before the tariff:
  - allocated business expenses per self-employed stream
  - Werbungskostenpauschale (§ 9a EStG), only with employment income
  - Sonderausgabenpauschale (§ 10c EStG)
"""

from dataclasses import dataclass
from decimal import Decimal

from ..models import DeductionBreakdown, TaxCalculationResult
from ..money import CENT, HUNDRED, ZERO, Amount, quantize_cents, to_decimal, truncate_euros
from .params import TaxYearParameters
from .solidaritaetszuschlag import compute_solidarity_surcharge

TEN_THOUSAND = Decimal("10000")

#: Flat marginal rates of zones 4 and 5, in percent.
ZONE4_MARGINAL = Decimal("42.00")
ZONE5_MARGINAL = Decimal("45.00")

#: Nebeneinkünfte above this oblige an employee to file — § 46 Abs. 2 Nr. 1 EStG
MANDATORY_FILING_THRESHOLD = Decimal("410")


def compute_progressive_tax(params: TaxYearParameters, taxable_income: Amount) -> Decimal:
    """Compute income tax for a taxable income under the § 32a tariff.

    Args:
        params: Statutory constants for the tax year.
        taxable_income: zvE in EUR. Fractions are cut to whole euros first.

    Returns:
        Income tax in EUR, truncated to whole euros, two decimal places.

    Examples (2024):
        11604  → 0.00       (Grundfreibetrag)
        100000 → 31397.00   (zone 4: 0.42 × 100000 − 10602.13 = 31397.87)
    """
    zve = truncate_euros(to_decimal(taxable_income))
    if zve <= params.grundfreibetrag:
        return ZERO.quantize(CENT)

    if zve <= params.zone2_upper:
        y = (zve - params.grundfreibetrag) / TEN_THOUSAND
        tax = (params.zone2_a * y + params.zone2_b) * y
    elif zve <= params.zone3_upper:
        z = (zve - params.zone2_upper) / TEN_THOUSAND
        tax = (params.zone3_a * z + params.zone3_b) * z + params.zone3_c
    elif zve <= params.zone4_upper:
        tax = params.zone4_rate * zve - params.zone4_sub
    else:
        tax = params.zone5_rate * zve - params.zone5_sub

    return truncate_euros(tax).quantize(CENT)


def compute_marginal_rate(params: TaxYearParameters, taxable_income: Amount) -> Decimal:
    """Rate in percent applied to the next euro of taxable income.

    Zones 2 and 3 use the derivative of the quadratic: (2a·y + b) / 10 000.
    """
    zve = truncate_euros(to_decimal(taxable_income))
    if zve <= params.grundfreibetrag:
        return ZERO.quantize(CENT)
    if zve <= params.zone2_upper:
        y = (zve - params.grundfreibetrag) / TEN_THOUSAND
        marginal = (2 * params.zone2_a * y + params.zone2_b) / TEN_THOUSAND
        return quantize_cents(marginal * HUNDRED)
    if zve <= params.zone3_upper:
        z = (zve - params.zone2_upper) / TEN_THOUSAND
        marginal = (2 * params.zone3_a * z + params.zone3_b) / TEN_THOUSAND
        return quantize_cents(marginal * HUNDRED)
    if zve <= params.zone4_upper:
        return ZONE4_MARGINAL
    return ZONE5_MARGINAL


def calculate_income_tax(
    params: TaxYearParameters,
    employment_income: Amount = ZERO,
    freiberuf_income: Amount = ZERO,
    gewerbe_income: Amount = ZERO,
    freiberuf_expenses: Amount = ZERO,
    gewerbe_expenses: Amount = ZERO,
) -> TaxCalculationResult:
    """Full income tax assessment across the three income streams.

    Args:
        params: Statutory constants for the tax year.
        employment_income: Gross wages (§ 19 EStG).
        freiberuf_income: Freiberuf revenue (§ 18 EStG).
        gewerbe_income: Gewerbe revenue (§ 15 EStG).
        freiberuf_expenses: Allocated Freiberuf business expenses incl. AfA.
        gewerbe_expenses: Allocated Gewerbe business expenses incl. AfA.

    Returns:
        TaxCalculationResult with deductions, zvE, income tax, Soli,
        total tax, marginal rate and effective rate (total tax / gross).
    """
    employment = to_decimal(employment_income)
    freiberuf = to_decimal(freiberuf_income)
    gewerbe = to_decimal(gewerbe_income)
    fb_expenses = to_decimal(freiberuf_expenses)
    gw_expenses = to_decimal(gewerbe_expenses)

    total_gross = employment + freiberuf + gewerbe

    werbungskosten = params.werbungskostenpauschale if employment > 0 else ZERO
    sonderausgaben = params.sonderausgabenpauschale
    total_deductions = fb_expenses + gw_expenses + werbungskosten + sonderausgaben

    deductions = DeductionBreakdown(
        business_expenses_freiberuf=fb_expenses,
        business_expenses_gewerbe=gw_expenses,
        werbungskostenpauschale=werbungskosten,
        sonderausgabenpauschale=sonderausgaben,
        total_deductions=total_deductions,
    )

    zve = truncate_euros(max(total_gross - total_deductions, ZERO))
    income_tax = compute_progressive_tax(params, zve)
    soli = compute_solidarity_surcharge(params, income_tax)
    total_tax = income_tax + soli

    if total_gross > 0:
        effective_rate = quantize_cents(total_tax * HUNDRED / total_gross)
    else:
        effective_rate = ZERO.quantize(CENT)

    return TaxCalculationResult(
        tax_year=params.year,
        employment_income=employment,
        freiberuf_income=freiberuf,
        gewerbe_income=gewerbe,
        total_gross_income=total_gross,
        deductions=deductions,
        taxable_income=zve,
        income_tax=income_tax,
        solidaritaetszuschlag=soli,
        total_tax=total_tax,
        marginal_rate=compute_marginal_rate(params, zve),
        effective_rate=effective_rate,
    )


@dataclass(frozen=True)
class MandatoryFilingStatus:
    year: int
    nebeneinkuenfte: Decimal
    threshold: Decimal
    filing_required: bool


def mandatory_filing_status(
    year: int,
    freiberuf_income: Amount = ZERO,
    gewerbe_income: Amount = ZERO,
) -> MandatoryFilingStatus:
    """Whether self-employed side income makes a tax return mandatory.

    Income not subject to Lohnsteuer (Freiberuf + Gewerbe) of more than
    410 € obliges the employee to file (§ 46 Abs. 2 Nr. 1 EStG).
    """
    side_income = quantize_cents(to_decimal(freiberuf_income) + to_decimal(gewerbe_income))
    return MandatoryFilingStatus(
        year=year,
        nebeneinkuenfte=side_income,
        threshold=MANDATORY_FILING_THRESHOLD,
        filing_required=side_income > MANDATORY_FILING_THRESHOLD,
    )
