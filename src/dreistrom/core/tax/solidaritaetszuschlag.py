"""Solidaritätszuschlag on assessed income tax.

§ 3 Abs. 3 SolZG: no surcharge while the income tax stays at or below the
Freigrenze (soli_exemption).
§ 4 Satz 2 SolZG: above it, the surcharge is capped by the Milderungszone —
11.9 % of the amount by which the tax exceeds the Freigrenze — so it grows
from zero instead of jumping to the full 5.5 %.

  Soli = min(5.5 % × ESt, 11.9 % × (ESt − Freigrenze))
"""

from decimal import Decimal

from ..money import CENT, ZERO, Amount, quantize_cents, to_decimal
from .params import TaxYearParameters


def compute_solidarity_surcharge(params: TaxYearParameters, income_tax: Amount) -> Decimal:
    """Calculate the Solidaritätszuschlag for an income tax amount.

    Args:
        params: Statutory constants for the tax year.
        income_tax: Assessed income tax (output of compute_progressive_tax).

    Returns:
        Surcharge in EUR, rounded half-up to 2 decimal places.

    Examples (2024, Freigrenze 18 130):
        18130 → 0.00
        19000 → 103.53   (full 1045.00, glide 870 × 0.119 = 103.53)
    """
    tax = to_decimal(income_tax)
    if tax <= params.soli_exemption:
        return ZERO.quantize(CENT)

    full = quantize_cents(tax * params.soli_rate)
    glide = quantize_cents((tax - params.soli_exemption) * params.soli_glide_rate)
    return min(full, glide)
