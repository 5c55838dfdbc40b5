"""Home office deduction: Arbeitszimmer against the Homeoffice-Pauschale.

  Arbeitszimmer (§ 4 Abs. 5 Nr. 6b EStG):
      (rent + utilities) × office area / total area × months used
  Homeoffice-Pauschale (§ 4 Abs. 5 Nr. 6c EStG):
      6 € per home office day, at most 1,260 € a year (210 days)

recommend_home_office computes both and picks the larger deduction; on a
tie the Arbeitszimmer is recommended.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from ..money import HUNDRED, Amount, quantize_cents, to_decimal

#: Homeoffice-Pauschale per day — § 4 Abs. 5 Nr. 6c Satz 1 EStG
PAUSCHALE_PER_DAY = Decimal("6.00")

#: Annual cap of the Pauschale — § 4 Abs. 5 Nr. 6c Satz 2 EStG
PAUSCHALE_MAX_YEAR = Decimal("1260.00")
PAUSCHALE_MAX_DAYS = 210

AREA_RATIO_PLACES = Decimal("0.0000000001")


class HomeOfficeMethod(str, Enum):
    ARBEITSZIMMER = "arbeitszimmer"
    PAUSCHALE = "pauschale"


@dataclass(frozen=True)
class HomeOfficeResult:
    method: HomeOfficeMethod
    deduction: Decimal
    details: str


@dataclass(frozen=True)
class HomeOfficeRecommendation:
    arbeitszimmer: HomeOfficeResult
    pauschale: HomeOfficeResult
    recommended: HomeOfficeMethod

    @property
    def deduction(self) -> Decimal:
        if self.recommended is HomeOfficeMethod.ARBEITSZIMMER:
            return self.arbeitszimmer.deduction
        return self.pauschale.deduction


def calculate_arbeitszimmer(
    monthly_rent: Amount,
    monthly_utilities: Amount,
    total_area_sqm: Amount,
    office_area_sqm: Amount,
    months: int = 12,
) -> HomeOfficeResult:
    """Floor-area share of rent and Nebenkosten for a dedicated office room.

    Raises:
        ValueError: total area not positive, office area negative or larger
            than the total, or months outside 1-12.
    """
    rent = to_decimal(monthly_rent)
    utilities = to_decimal(monthly_utilities)
    total_area = to_decimal(total_area_sqm)
    office_area = to_decimal(office_area_sqm)
    if total_area <= 0:
        raise ValueError("Total area must be positive")
    if office_area < 0 or office_area > total_area:
        raise ValueError(
            f"Office area must be between 0 and the total area, got: {office_area}"
        )
    if not 1 <= months <= 12:
        raise ValueError(f"Months must be between 1 and 12, got: {months}")

    area_ratio = (office_area / total_area).quantize(AREA_RATIO_PLACES, rounding=ROUND_HALF_UP)
    deduction = quantize_cents((rent + utilities) * area_ratio * months)
    details = (
        f"Arbeitszimmer: {office_area:.1f} m² / {total_area:.1f} m² = "
        f"{area_ratio * HUNDRED:.1f} % of ({rent:.2f} + {utilities:.2f}) EUR/month "
        f"× {months} months"
    )
    return HomeOfficeResult(HomeOfficeMethod.ARBEITSZIMMER, deduction, details)


def calculate_pauschale(home_office_days: int) -> HomeOfficeResult:
    """Flat 6 € per day worked from home, capped at 210 days."""
    if home_office_days < 0:
        raise ValueError(f"Home office days cannot be negative, got: {home_office_days}")
    days = min(home_office_days, PAUSCHALE_MAX_DAYS)
    deduction = quantize_cents(min(PAUSCHALE_PER_DAY * days, PAUSCHALE_MAX_YEAR))
    if home_office_days > PAUSCHALE_MAX_DAYS:
        details = (
            f"Homeoffice-Pauschale: {home_office_days} days (capped at {PAUSCHALE_MAX_DAYS}) "
            f"× {PAUSCHALE_PER_DAY} EUR = {deduction} EUR"
        )
    else:
        details = f"Homeoffice-Pauschale: {home_office_days} days × {PAUSCHALE_PER_DAY} EUR = {deduction} EUR"
    return HomeOfficeResult(HomeOfficeMethod.PAUSCHALE, deduction, details)


def recommend_home_office(
    monthly_rent: Amount,
    monthly_utilities: Amount,
    total_area_sqm: Amount,
    office_area_sqm: Amount,
    months: int,
    home_office_days: int,
) -> HomeOfficeRecommendation:
    """Compare both methods and recommend the larger deduction.

    Examples:
        1200 rent + 300 utilities, 12 of 80 m², 12 months, 150 days →
            Arbeitszimmer 2700.00 vs Pauschale 900.00 → ARBEITSZIMMER
    """
    arbeitszimmer = calculate_arbeitszimmer(
        monthly_rent, monthly_utilities, total_area_sqm, office_area_sqm, months,
    )
    pauschale = calculate_pauschale(home_office_days)
    if arbeitszimmer.deduction >= pauschale.deduction:
        recommended = HomeOfficeMethod.ARBEITSZIMMER
    else:
        recommended = HomeOfficeMethod.PAUSCHALE
    return HomeOfficeRecommendation(arbeitszimmer, pauschale, recommended)
