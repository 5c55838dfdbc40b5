"""Umsatzsteuer: gross/net conversion and output/input VAT netting.

  VAT  = gross × rate / (100 + rate)
  net  = gross × 100 / (100 + rate)
  gross = net × (100 + rate) / 100

Output VAT (Umsatzsteuer) comes from regularly taxed invoices issued in the
filing period. Input VAT (Vorsteuer) is extracted from the Freiberuf and
Gewerbe shares of each expense; the personal share is never deductible.
Kleinunternehmer (§ 19 UStG) charge no VAT and deduct none, so their summary
is all zeros.

The treatment of an invoice (regular, reverse charge, Drittland) follows from
the recipient: see determine_vat_treatment.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from .allocation import allocate
from .models import (
    ClientType,
    ExpenseVatEntry,
    InvoiceStream,
    InvoiceVatEntry,
    VatSummary,
    VatTreatment,
)
from .money import CENT, HUNDRED, ZERO, Amount, quantize_cents, to_decimal
from .tax.reserve import project_annual

#: Regelsteuersatz — § 12 Abs. 1 UStG
STANDARD_RATE = Decimal("19")

#: Ermäßigter Steuersatz — § 12 Abs. 2 UStG
REDUCED_RATE = Decimal("7")

#: § 19 Abs. 1 UStG limits (from 2025): prior-year revenue and current-year revenue
KLEINUNTERNEHMER_PRIOR_YEAR_LIMIT = Decimal("22000")
KLEINUNTERNEHMER_CURRENT_YEAR_LIMIT = Decimal("50000")

RATIO_PLACES = Decimal("0.0001")

#: EU member states other than Germany (ISO 3166-1 alpha-2)
EU_COUNTRIES = frozenset({
    "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR",
    "GR", "HU", "IE", "IT", "LV", "LT", "LU", "MT", "NL", "PL",
    "PT", "RO", "SK", "SI", "ES", "SE",
})

#: Platform payout providers whose credits are reported in the ZM
PLATFORM_PAYOUT_KEYWORDS = ("apple", "google")

VAT_NOTICES = {
    VatTreatment.REVERSE_CHARGE:
        "Steuerschuldnerschaft des Leistungsempfängers (Reverse Charge, § 13b UStG).",
    VatTreatment.THIRD_COUNTRY:
        "Leistung nicht steuerbar gemäß § 3a UStG (Leistungsort im Drittland).",
    VatTreatment.INTRA_EU:
        "Steuerfreie innergemeinschaftliche Lieferung/Leistung.",
}


def extract_vat(gross: Optional[Amount], rate: Amount = STANDARD_RATE) -> Decimal:
    """VAT contained in a gross amount.

    Examples:
        extract_vat(1190, 19) → 190.00
        extract_vat(107, 7)   → 7.00
    """
    amount = to_decimal(gross)
    r = to_decimal(rate)
    if amount == 0 or r == 0:
        return ZERO.quantize(CENT)
    return quantize_cents(amount * r / (HUNDRED + r))


def net_from_gross(gross: Optional[Amount], rate: Amount = STANDARD_RATE) -> Decimal:
    amount = to_decimal(gross)
    if amount == 0:
        return ZERO.quantize(CENT)
    return quantize_cents(amount * HUNDRED / (HUNDRED + to_decimal(rate)))


def gross_from_net(net: Optional[Amount], rate: Amount = STANDARD_RATE) -> Decimal:
    amount = to_decimal(net)
    if amount == 0:
        return ZERO.quantize(CENT)
    return quantize_cents(amount * (HUNDRED + to_decimal(rate)) / HUNDRED)


@dataclass(frozen=True)
class FilingPeriod:
    """Inclusive date range of one Umsatzsteuer-Voranmeldung or annual return."""
    start: date
    end: date

    @classmethod
    def month(cls, year: int, month: int) -> "FilingPeriod":
        last_day = calendar.monthrange(year, month)[1]
        return cls(date(year, month, 1), date(year, month, last_day))

    @classmethod
    def quarter(cls, year: int, quarter: int) -> "FilingPeriod":
        if quarter not in (1, 2, 3, 4):
            raise ValueError(f"Quarter must be 1-4, got: {quarter}")
        first_month = (quarter - 1) * 3 + 1
        last_month = first_month + 2
        last_day = calendar.monthrange(year, last_month)[1]
        return cls(date(year, first_month, 1), date(year, last_month, last_day))

    @classmethod
    def year(cls, year: int) -> "FilingPeriod":
        return cls(date(year, 1, 1), date(year, 12, 31))

    def __contains__(self, d: date) -> bool:
        return self.start <= d <= self.end


def vat_summary(
    invoices: Iterable[InvoiceVatEntry],
    expenses: Iterable[ExpenseVatEntry],
    period: FilingPeriod,
    kleinunternehmer: Optional[bool] = None,
) -> VatSummary:
    """Net output VAT against deductible input VAT for one filing period.

    Args:
        invoices: Issued invoices; only REGULAR treatment within the period
            carries output VAT.
        expenses: Expenses with gross amount, rate and allocation ratio.
            Expenses without a ratio are not deductible.
        period: Filing period (inclusive).
        kleinunternehmer: § 19 UStG status; yields an all-zero summary.
            Read from config.json if not provided.

    Returns:
        VatSummary; a negative net_payable is a refund position.
    """
    if kleinunternehmer is None:
        from .config import get_config
        kleinunternehmer = get_config().kleinunternehmer
    if kleinunternehmer:
        return VatSummary.zero()

    output = {InvoiceStream.FREIBERUF: ZERO, InvoiceStream.GEWERBE: ZERO}
    for inv in invoices:
        if inv.treatment is not VatTreatment.REGULAR or inv.issue_date not in period:
            continue
        output[inv.stream] += to_decimal(inv.vat_amount)

    freiberuf_input = gewerbe_input = ZERO
    for exp in expenses:
        if exp.ratio is None or exp.expense_date not in period:
            continue
        split = allocate(exp.gross_amount, exp.ratio)
        freiberuf_input += extract_vat(split.freiberuf, exp.vat_rate)
        gewerbe_input += extract_vat(split.gewerbe, exp.vat_rate)

    freiberuf_output = quantize_cents(output[InvoiceStream.FREIBERUF])
    gewerbe_output = quantize_cents(output[InvoiceStream.GEWERBE])
    output_vat = freiberuf_output + gewerbe_output
    input_vat = quantize_cents(freiberuf_input + gewerbe_input)

    return VatSummary(
        output_vat=output_vat,
        freiberuf_output_vat=freiberuf_output,
        gewerbe_output_vat=gewerbe_output,
        input_vat=input_vat,
        freiberuf_input_vat=quantize_cents(freiberuf_input),
        gewerbe_input_vat=quantize_cents(gewerbe_input),
        net_payable=output_vat - input_vat,
        kleinunternehmer=False,
    )


@dataclass(frozen=True)
class KleinunternehmerStatus:
    year: int
    current_revenue: Decimal
    current_year_limit: Decimal
    current_ratio: Decimal
    projected_revenue: Decimal
    projected_year_limit: Decimal
    projected_ratio: Decimal
    current_exceeded: bool
    projected_exceeded: bool


def _ratio(amount: Decimal, limit: Decimal) -> Decimal:
    if limit <= 0:
        return ZERO
    return (amount / limit).quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)


def kleinunternehmer_status(
    revenue: Amount,
    year: int,
    today: date,
    prior_year_limit: Amount = KLEINUNTERNEHMER_PRIOR_YEAR_LIMIT,
    current_year_limit: Amount = KLEINUNTERNEHMER_CURRENT_YEAR_LIMIT,
) -> KleinunternehmerStatus:
    """Self-employed revenue of `year` against the § 19 UStG limits.

    The revenue so far is compared with the prior-year limit; the revenue
    projected to the full year is compared with the current-year limit.
    A ratio of 1 or more counts as exceeded.
    """
    rev = quantize_cents(to_decimal(revenue))
    prior_limit = to_decimal(prior_year_limit)
    current_limit = to_decimal(current_year_limit)

    projected = project_annual(rev, year, today) if rev != 0 else rev
    current_ratio = _ratio(rev, prior_limit)
    projected_ratio = _ratio(projected, current_limit)

    return KleinunternehmerStatus(
        year=year,
        current_revenue=rev,
        current_year_limit=prior_limit,
        current_ratio=current_ratio,
        projected_revenue=projected,
        projected_year_limit=current_limit,
        projected_ratio=projected_ratio,
        current_exceeded=current_ratio >= 1,
        projected_exceeded=projected_ratio >= 1,
    )


def determine_vat_treatment(
    country: Optional[str],
    client_type: ClientType = ClientType.B2C,
    ust_id: Optional[str] = None,
) -> VatTreatment:
    """VAT treatment of an invoice from the recipient's country and status.

      DE                              → REGULAR
      EU, B2B with a USt-IdNr         → REVERSE_CHARGE (§ 13b UStG)
      EU, B2C or without a USt-IdNr   → REGULAR
      outside the EU (Drittland)      → THIRD_COUNTRY (§ 3a UStG)

    A recipient without a country is treated as domestic.
    """
    if not country:
        return VatTreatment.REGULAR
    code = country.strip().upper()
    if code == "DE":
        return VatTreatment.REGULAR
    if code in EU_COUNTRIES:
        if client_type is ClientType.B2B and ust_id and ust_id.strip():
            return VatTreatment.REVERSE_CHARGE
        return VatTreatment.REGULAR
    return VatTreatment.THIRD_COUNTRY


def is_zm_reportable(country: Optional[str], treatment: VatTreatment, client_name: str = "") -> bool:
    """Whether an invoice belongs in the Zusammenfassende Meldung.

    EU reverse-charge invoices always do, as do payouts from the known
    app-store platforms.
    """
    if treatment is VatTreatment.REVERSE_CHARGE and (country or "").strip().upper() in EU_COUNTRIES:
        return True
    name = client_name.lower()
    return any(keyword in name for keyword in PLATFORM_PAYOUT_KEYWORDS)


def vat_notice(treatment: VatTreatment) -> Optional[str]:
    """Mandatory invoice text for the treatment, or None for regular VAT."""
    return VAT_NOTICES.get(treatment)
