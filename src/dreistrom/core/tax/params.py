"""Per-year statutory constants for § 32a EStG and § 4 SolZG.

One immutable record per Veranlagungszeitraum. Supporting a new tax year
means adding a record to TAX_YEAR_PARAMETERS — calculator code never
branches on the year. Values are the ones published in the Bundesgesetzblatt
for the respective year.

Zone layout (zvE = taxable income in whole EUR):
  1. zvE ≤ grundfreibetrag                → 0
  2. zvE ≤ zone2_upper  (a2·y + b2)·y      y = (zvE − grundfreibetrag) / 10 000
  3. zvE ≤ zone3_upper  (a3·z + b3)·z + c3 z = (zvE − zone2_upper) / 10 000
  4. zvE ≤ zone4_upper  rate4·zvE − sub4
  5. above              rate5·zvE − sub5   (Reichensteuer)
"""

from dataclasses import dataclass
from decimal import Decimal

from ..exceptions import MissingTaxYearError


@dataclass(frozen=True)
class TaxYearParameters:
    year: int

    grundfreibetrag: Decimal
    zone2_upper: Decimal
    zone3_upper: Decimal
    zone4_upper: Decimal

    zone2_a: Decimal
    zone2_b: Decimal

    zone3_a: Decimal
    zone3_b: Decimal
    zone3_c: Decimal

    zone4_rate: Decimal
    zone4_sub: Decimal

    zone5_rate: Decimal
    zone5_sub: Decimal

    soli_rate: Decimal               #: § 4 SolZG — 5.5 %
    soli_exemption: Decimal          #: § 3 Abs. 3 SolZG — Freigrenze on income tax
    soli_glide_rate: Decimal         #: § 4 Satz 2 SolZG — Milderungszone 11.9 %

    werbungskostenpauschale: Decimal  #: § 9a Nr. 1a EStG
    sonderausgabenpauschale: Decimal  #: § 10c EStG

    @property
    def zone_boundaries(self) -> tuple[Decimal, Decimal, Decimal, Decimal]:
        return (self.grundfreibetrag, self.zone2_upper, self.zone3_upper, self.zone4_upper)


TAX_YEAR_PARAMETERS: dict[int, TaxYearParameters] = {
    2024: TaxYearParameters(
        year=2024,
        grundfreibetrag=Decimal("11604"),
        zone2_upper=Decimal("17005"),
        zone3_upper=Decimal("66760"),
        zone4_upper=Decimal("277825"),
        zone2_a=Decimal("922.98"),
        zone2_b=Decimal("1400"),
        zone3_a=Decimal("181.19"),
        zone3_b=Decimal("2397"),
        zone3_c=Decimal("1025.38"),
        zone4_rate=Decimal("0.42"),
        zone4_sub=Decimal("10602.13"),
        zone5_rate=Decimal("0.45"),
        zone5_sub=Decimal("18936.88"),
        soli_rate=Decimal("0.055"),
        soli_exemption=Decimal("18130"),
        soli_glide_rate=Decimal("0.119"),
        werbungskostenpauschale=Decimal("1230"),
        sonderausgabenpauschale=Decimal("36"),
    ),
    2025: TaxYearParameters(
        year=2025,
        grundfreibetrag=Decimal("12096"),
        zone2_upper=Decimal("17443"),
        zone3_upper=Decimal("68480"),
        zone4_upper=Decimal("277825"),
        zone2_a=Decimal("932.30"),
        zone2_b=Decimal("1400"),
        zone3_a=Decimal("176.64"),
        zone3_b=Decimal("2397"),
        zone3_c=Decimal("1015.13"),
        zone4_rate=Decimal("0.42"),
        zone4_sub=Decimal("10911.92"),
        zone5_rate=Decimal("0.45"),
        zone5_sub=Decimal("19246.67"),
        soli_rate=Decimal("0.055"),
        soli_exemption=Decimal("19950"),
        soli_glide_rate=Decimal("0.119"),
        werbungskostenpauschale=Decimal("1230"),
        sonderausgabenpauschale=Decimal("36"),
    ),
    2026: TaxYearParameters(
        year=2026,
        grundfreibetrag=Decimal("12348"),
        zone2_upper=Decimal("17799"),
        zone3_upper=Decimal("69878"),
        zone4_upper=Decimal("277825"),
        zone2_a=Decimal("914.51"),
        zone2_b=Decimal("1400"),
        zone3_a=Decimal("173.10"),
        zone3_b=Decimal("2397"),
        zone3_c=Decimal("1034.87"),
        zone4_rate=Decimal("0.42"),
        zone4_sub=Decimal("11135.63"),
        zone5_rate=Decimal("0.45"),
        zone5_sub=Decimal("19470.38"),
        soli_rate=Decimal("0.055"),
        soli_exemption=Decimal("20350"),
        soli_glide_rate=Decimal("0.119"),
        werbungskostenpauschale=Decimal("1230"),
        sonderausgabenpauschale=Decimal("36"),
    ),
}


def get_tax_year_parameters(year: int) -> TaxYearParameters:
    """Look up the statutory constants for a tax year.

    Raises:
        MissingTaxYearError: the year has no record. There is no fallback
            to a neighbouring year.
    """
    try:
        return TAX_YEAR_PARAMETERS[year]
    except KeyError:
        raise MissingTaxYearError(year) from None


def supported_years() -> list[int]:
    return sorted(TAX_YEAR_PARAMETERS)
