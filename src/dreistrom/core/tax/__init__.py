"""German income and trade tax engine for sole proprietors.

High-level entry point:
    from dreistrom.core.tax import assess_income_tax

Tax calculation pipeline for one year:
  1. Deductions          (§ 9a / § 10c EStG)     — Pauschalen + business expenses
  2. Einkommensteuer     (§ 32a EStG)            — five-zone progressive tariff
  3. Solidaritätszuschlag (§ 3/§ 4 SolZG)        — 5.5 % with Freigrenze and glide zone
  4. Gewerbesteuer       (§ 11/§ 16 GewStG)      — on Gewerbe profit, § 35 EStG credit

Sub-modules (importable individually for testing or reuse):
    params                — statutory constants per tax year
    income_tax            — § 32a tariff, marginal rate, full assessment
    solidaritaetszuschlag — Soli with glide zone
    gewerbesteuer         — trade tax, § 35 credit, threshold and Abfärbung status
    reserve               — monthly tax reserve recommendation
    vorauszahlung         — quarterly prepayments (§ 37 EStG)
    home_office           — Arbeitszimmer vs Homeoffice-Pauschale
"""

from typing import Optional

from ..models import TaxCalculationResult
from ..money import ZERO, Amount
from .gewerbesteuer import (
    DEFAULT_ALLOWANCE,
    DEFAULT_STEUERMESSZAHL,
    PARAGRAPH_35_FACTOR,
    AbfaerbungStatus,
    TradeTaxParameters,
    TradeTaxThresholdStatus,
    abfaerbung_status,
    compute_trade_tax,
    trade_tax_threshold_status,
)
from .home_office import (
    HomeOfficeMethod,
    HomeOfficeRecommendation,
    HomeOfficeResult,
    calculate_arbeitszimmer,
    calculate_pauschale,
    recommend_home_office,
)
from .income_tax import (
    MandatoryFilingStatus,
    calculate_income_tax,
    compute_marginal_rate,
    compute_progressive_tax,
    mandatory_filing_status,
)
from .params import (
    TAX_YEAR_PARAMETERS,
    TaxYearParameters,
    get_tax_year_parameters,
    supported_years,
)
from .reserve import (
    DEFAULT_RESERVE_RATE,
    TaxReserveRecommendation,
    recommend_tax_reserve,
)
from .solidaritaetszuschlag import compute_solidarity_surcharge
from .vorauszahlung import (
    VorauszahlungSchedule,
    check_deviation,
    vorauszahlung_schedule,
)

__all__ = [
    "assess_income_tax",
    # params
    "TAX_YEAR_PARAMETERS",
    "TaxYearParameters",
    "get_tax_year_parameters",
    "supported_years",
    # income_tax
    "MandatoryFilingStatus",
    "calculate_income_tax",
    "compute_marginal_rate",
    "compute_progressive_tax",
    "mandatory_filing_status",
    # solidaritaetszuschlag
    "compute_solidarity_surcharge",
    # gewerbesteuer
    "DEFAULT_ALLOWANCE",
    "DEFAULT_STEUERMESSZAHL",
    "PARAGRAPH_35_FACTOR",
    "AbfaerbungStatus",
    "TradeTaxParameters",
    "TradeTaxThresholdStatus",
    "abfaerbung_status",
    "compute_trade_tax",
    "trade_tax_threshold_status",
    # home_office
    "HomeOfficeMethod",
    "HomeOfficeRecommendation",
    "HomeOfficeResult",
    "calculate_arbeitszimmer",
    "calculate_pauschale",
    "recommend_home_office",
    # reserve
    "DEFAULT_RESERVE_RATE",
    "TaxReserveRecommendation",
    "recommend_tax_reserve",
    # vorauszahlung
    "VorauszahlungSchedule",
    "check_deviation",
    "vorauszahlung_schedule",
]


def assess_income_tax(
    year: int,
    employment_income: Amount = ZERO,
    freiberuf_income: Amount = ZERO,
    gewerbe_income: Amount = ZERO,
    freiberuf_expenses: Amount = ZERO,
    gewerbe_expenses: Amount = ZERO,
    params: Optional[TaxYearParameters] = None,
) -> TaxCalculationResult:
    """Assess income tax and Soli for a year across all three streams.

    Args:
        year: Tax year. Must be one of supported_years() unless params is
            given explicitly.
        employment_income: Gross wages (§ 19 EStG).
        freiberuf_income: Freiberuf revenue (§ 18 EStG).
        gewerbe_income: Gewerbe revenue (§ 15 EStG).
        freiberuf_expenses: Allocated Freiberuf expenses incl. AfA.
        gewerbe_expenses: Allocated Gewerbe expenses incl. AfA.
        params: Override the statutory constants (e.g. for projections).

    Returns:
        TaxCalculationResult with deductions, zvE, income tax, Soli,
        marginal and effective rate.

    Raises:
        MissingTaxYearError: no constants are configured for `year`.

    References:
        § 32a EStG — Einkommensteuertarif
        § 9a EStG  — Werbungskostenpauschale
        § 10c EStG — Sonderausgabenpauschale
        § 4 SolZG  — Solidaritätszuschlag
    """
    if params is None:
        params = get_tax_year_parameters(year)
    return calculate_income_tax(
        params,
        employment_income=employment_income,
        freiberuf_income=freiberuf_income,
        gewerbe_income=gewerbe_income,
        freiberuf_expenses=freiberuf_expenses,
        gewerbe_expenses=gewerbe_expenses,
    )
