"""Quarterly income tax prepayments (Einkommensteuer-Vorauszahlungen).

§ 37 Abs. 1 EStG: prepayments are due on 10 March, 10 June, 10 September
and 10 December. The Finanzamt sets them from the last assessment; when the
projected income deviates by more than 25 % from that basis, an adjustment
request (Anpassungsantrag) should be filed.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..money import HUNDRED, ZERO, Amount, quantize_cents, to_decimal
from .reserve import project_annual

#: (month, day) of the four due dates — § 37 Abs. 1 EStG
DUE_DATES = ((3, 10), (6, 10), (9, 10), (12, 10))

#: Deviation in percent above which an Anpassungsantrag is suggested
DEVIATION_THRESHOLD = Decimal("25")

FOUR = Decimal("4")


@dataclass(frozen=True)
class QuarterPayment:
    quarter: int
    due_date: date
    amount: Decimal
    paid: Decimal = ZERO

    def status(self, today: date) -> str:
        if self.paid >= self.amount:
            return "paid"
        if today > self.due_date:
            return "overdue"
        return "pending"


@dataclass(frozen=True)
class AdjustmentSuggestion:
    recommended: bool
    projected_income: Decimal = ZERO
    deviation_pct: Decimal = ZERO
    suggested_quarterly: Decimal = ZERO


@dataclass(frozen=True)
class VorauszahlungSchedule:
    year: int
    assessment_basis: Decimal
    quarterly_amount: Decimal
    annual_total: Decimal
    payments: list[QuarterPayment] = field(default_factory=list)


def vorauszahlung_schedule(
    year: int,
    assessment_basis: Amount,
    paid: Optional[dict[int, Decimal]] = None,
) -> VorauszahlungSchedule:
    """Split the assessed annual tax into four quarterly prepayments.

    Args:
        year: Tax year.
        assessment_basis: Annual tax from the last Bescheid.
        paid: Amount already paid per quarter (1–4).
    """
    basis = to_decimal(assessment_basis)
    quarterly = quantize_cents(basis / FOUR)
    paid = paid or {}
    payments = [
        QuarterPayment(
            quarter=q,
            due_date=date(year, month, day),
            amount=quarterly,
            paid=to_decimal(paid.get(q)),
        )
        for q, (month, day) in enumerate(DUE_DATES, start=1)
    ]
    return VorauszahlungSchedule(
        year=year,
        assessment_basis=basis,
        quarterly_amount=quarterly,
        annual_total=quarterly * FOUR,
        payments=payments,
    )


def check_deviation(
    actual_income: Amount,
    assessment_basis: Amount,
    year: int,
    today: date,
) -> AdjustmentSuggestion:
    """Suggest an Anpassungsantrag when projected income deviates > 25 %."""
    basis = to_decimal(assessment_basis)
    actual = to_decimal(actual_income)
    if basis == 0 or actual == 0:
        return AdjustmentSuggestion(recommended=False)

    projected = project_annual(actual, year, today)
    deviation = quantize_cents(abs(projected - basis) * HUNDRED / basis)
    recommended = deviation > DEVIATION_THRESHOLD
    return AdjustmentSuggestion(
        recommended=recommended,
        projected_income=projected,
        deviation_pct=deviation,
        suggested_quarterly=quantize_cents(projected / FOUR) if recommended else ZERO,
    )
