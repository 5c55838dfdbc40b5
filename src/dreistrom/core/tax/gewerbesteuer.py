"""Gewerbesteuer (trade tax) on Gewerbe profits and the § 35 EStG credit.

Formula:
  1. Gewerbeertrag    = max(0, revenue − allocated Gewerbe expenses)
  2. Taxable          = max(0, Gewerbeertrag − Freibetrag)      § 11 Abs. 1 GewStG
  3. Steuermessbetrag = Taxable × Steuermesszahl (3.5 %)          § 11 Abs. 2 GewStG
  4. Gewerbesteuer    = Steuermessbetrag × Hebesatz / 100         § 16 GewStG
  5. § 35 credit      = min(4.0 × Steuermessbetrag, income tax)
  6. Net burden       = max(0, Gewerbesteuer − credit)

The Hebesatz is set by the municipality and comes from config.json.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..models import TradeTaxResult
from ..money import HUNDRED, ZERO, Amount, quantize_cents, to_decimal

#: Freibetrag for natural persons and partnerships — § 11 Abs. 1 Satz 3 Nr. 1 GewStG
DEFAULT_ALLOWANCE = Decimal("24500")

#: Steuermesszahl — § 11 Abs. 2 GewStG
DEFAULT_STEUERMESSZAHL = Decimal("0.035")

#: Credit factor on the Steuermessbetrag — § 35 Abs. 1 EStG
PARAGRAPH_35_FACTOR = Decimal("4.0")

#: Bookkeeping obligation thresholds — § 141 Abs. 1 AO
BILANZIERUNG_REVENUE = Decimal("800000")
BILANZIERUNG_PROFIT = Decimal("80000")

#: Abfärbung, § 15 Abs. 3 Nr. 1 EStG (BFH Bagatellgrenze): Gewerbe share of the
#: self-employed revenue and the Gewerbe revenue itself must both exceed these
ABFAERBUNG_RATIO = Decimal("0.03")
ABFAERBUNG_AMOUNT = Decimal("24500")

RATIO_PLACES = Decimal("0.0001")

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class TradeTaxParameters:
    hebesatz: int = 410
    allowance: Decimal = DEFAULT_ALLOWANCE
    steuermesszahl: Decimal = DEFAULT_STEUERMESSZAHL
    credit_factor: Decimal = PARAGRAPH_35_FACTOR

    @classmethod
    def from_config(cls) -> "TradeTaxParameters":
        """Build parameters from config.json."""
        from ..config import get_config
        cfg = get_config()
        return cls(
            hebesatz=cfg.hebesatz,
            allowance=cfg.trade_tax_allowance,
            steuermesszahl=cfg.steuermesszahl,
        )


@dataclass(frozen=True)
class TradeTaxThresholdStatus:
    """Dashboard view of the Gewerbe thresholds for one year."""
    revenue: Decimal
    profit: Decimal
    allowance: Decimal
    above_allowance: bool
    bilanzierung_revenue_exceeded: bool
    bilanzierung_profit_exceeded: bool

    @property
    def bilanzierungspflicht(self) -> bool:
        return self.bilanzierung_revenue_exceeded or self.bilanzierung_profit_exceeded


def gewerbe_profit(revenue: Amount, expenses: Amount) -> Decimal:
    """Gewerbeertrag: revenue minus allocated expenses, never below zero."""
    return max(to_decimal(revenue) - to_decimal(expenses), ZERO)


def compute_trade_tax(
    revenue: Amount,
    expenses: Amount,
    income_tax: Amount,
    params: Optional[TradeTaxParameters] = None,
) -> TradeTaxResult:
    """Calculate Gewerbesteuer and the § 35 EStG credit.

    Args:
        revenue: Gewerbe revenue for the year.
        expenses: Allocated Gewerbe business expenses (incl. AfA).
        income_tax: Total income tax of the taxpayer; caps the credit.
        params: Allowance, Messzahl and Hebesatz. Read from config.json
            if not provided.

    Returns:
        TradeTaxResult with all intermediate values.

    Examples (Hebesatz 410):
        revenue=60000, expenses=0, income_tax=20000 →
            base 1242.50, trade tax 5094.25, credit 4970.00, net 124.25
    """
    if params is None:
        params = TradeTaxParameters.from_config()

    profit = gewerbe_profit(revenue, expenses)
    taxable_profit = max(profit - params.allowance, ZERO)

    assessment_base = quantize_cents(taxable_profit * params.steuermesszahl)
    trade_tax = quantize_cents(assessment_base * Decimal(params.hebesatz) / HUNDRED)

    max_credit = quantize_cents(params.credit_factor * assessment_base)
    credit = min(max_credit, max(to_decimal(income_tax), ZERO))

    net_burden = max(trade_tax - credit, ZERO)

    return TradeTaxResult(
        profit=profit,
        allowance=params.allowance,
        taxable_profit=taxable_profit,
        assessment_base=assessment_base,
        hebesatz=params.hebesatz,
        trade_tax=trade_tax,
        credit=credit,
        net_burden=net_burden,
    )


def trade_tax_threshold_status(
    revenue: Amount,
    expenses: Amount,
    allowance: Decimal = DEFAULT_ALLOWANCE,
) -> TradeTaxThresholdStatus:
    """Compare Gewerbe revenue and real profit against the statutory thresholds."""
    rev = to_decimal(revenue)
    profit = gewerbe_profit(rev, expenses)
    return TradeTaxThresholdStatus(
        revenue=rev,
        profit=profit,
        allowance=allowance,
        above_allowance=profit > allowance,
        bilanzierung_revenue_exceeded=rev > BILANZIERUNG_REVENUE,
        bilanzierung_profit_exceeded=profit > BILANZIERUNG_PROFIT,
    )


@dataclass(frozen=True)
class AbfaerbungStatus:
    year: int
    gewerbe_revenue: Decimal
    self_employed_revenue: Decimal
    ratio: Decimal
    threshold_exceeded: bool


def abfaerbung_status(
    gewerbe_revenue: Amount,
    self_employed_revenue: Amount,
    year: int,
) -> AbfaerbungStatus:
    """Check whether Gewerbe revenue taints the Freiberuf income.

    Above both limits the whole self-employed income may be reclassified
    as gewerblich and becomes subject to Gewerbesteuer.

    Args:
        gewerbe_revenue: Gewerbe revenue of the year.
        self_employed_revenue: Freiberuf plus Gewerbe revenue of the year.
        year: Calendar year, for reporting only.
    """
    gewerbe = quantize_cents(to_decimal(gewerbe_revenue))
    total = quantize_cents(to_decimal(self_employed_revenue))
    if gewerbe <= 0 or total <= 0:
        return AbfaerbungStatus(year, gewerbe, total, ZERO.quantize(RATIO_PLACES), False)

    ratio = (gewerbe / total).quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)
    exceeded = ratio > ABFAERBUNG_RATIO and gewerbe > ABFAERBUNG_AMOUNT
    if exceeded:
        logger.warning(
            "Abfärbung threshold exceeded for %s: ratio=%s, Gewerbe revenue=%s EUR",
            year, ratio, gewerbe,
        )
    return AbfaerbungStatus(year, gewerbe, total, ratio, exceeded)
