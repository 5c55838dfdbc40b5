"""Tax reserve (Steuerrücklage) recommendation for self-employed income.

Self-employed taxpayers pay income tax, Soli and Gewerbesteuer in arrears,
so a fixed share of net profit (default 30 %) should be set aside monthly.
For the running year the year-to-date profit is projected to a full year
pro rata by day of year; the outstanding amount is spread over the months
that remain, the current month included.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..money import HUNDRED, ZERO, Amount, quantize_cents, to_decimal

DEFAULT_RESERVE_RATE = Decimal("30")


@dataclass(frozen=True)
class TaxReserveRecommendation:
    year: int
    net_profit: Decimal
    projected_annual_profit: Decimal
    reserve_rate: Decimal
    annual_reserve: Decimal
    already_reserved: Decimal
    remaining: Decimal
    months_remaining: int
    monthly_reserve: Decimal


def _days_in_year(year: int) -> int:
    return (date(year + 1, 1, 1) - date(year, 1, 1)).days


def project_annual(ytd_amount: Decimal, year: int, today: date) -> Decimal:
    """Extrapolate a year-to-date amount to the full year.

    Only the running year is projected; past and future years return the
    amount unchanged.
    """
    if today.year != year:
        return ytd_amount
    day_of_year = today.timetuple().tm_yday
    return quantize_cents(ytd_amount * _days_in_year(year) / Decimal(day_of_year))


def months_remaining(year: int, today: date) -> int:
    if today.year > year:
        return 0
    if today.year < year:
        return 12
    return 12 - today.month + 1


def recommend_tax_reserve(
    net_profit: Amount,
    year: int,
    today: date,
    rate: Amount = DEFAULT_RESERVE_RATE,
    already_reserved: Amount = ZERO,
) -> TaxReserveRecommendation:
    """Recommend a monthly transfer to the tax reserve account.

    Args:
        net_profit: Year-to-date self-employed profit (revenue − expenses).
            Losses are treated as zero.
        year: Tax year.
        today: Reference date for the projection.
        rate: Reserve rate in percent.
        already_reserved: Amount already set aside for the year.
    """
    profit = max(to_decimal(net_profit), ZERO)
    reserve_rate = to_decimal(rate)
    reserved = to_decimal(already_reserved)

    projected = project_annual(profit, year, today)
    annual_reserve = quantize_cents(projected * reserve_rate / HUNDRED)
    remaining = max(annual_reserve - reserved, ZERO)
    months = months_remaining(year, today)
    monthly = quantize_cents(remaining / months) if months > 0 else ZERO

    return TaxReserveRecommendation(
        year=year,
        net_profit=profit,
        projected_annual_profit=projected,
        reserve_rate=reserve_rate,
        annual_reserve=annual_reserve,
        already_reserved=reserved,
        remaining=remaining,
        months_remaining=months,
        monthly_reserve=monthly,
    )
