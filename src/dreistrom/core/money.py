"""Decimal helpers shared by all calculators.

Rounding rules:
  - quantize_cents: commercial rounding (half away from zero) to 0.01
  - truncate_euros: cut toward zero to whole euros (§32a Abs. 1 S. 6 EStG)
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Optional, Union

CENT = Decimal("0.01")
EURO = Decimal("1")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

Amount = Union[Decimal, int, str]


def to_decimal(value: Optional[Amount]) -> Decimal:
    """Coerce an int / str / Decimal to Decimal. None becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def truncate_euros(value: Decimal) -> Decimal:
    return value.quantize(EURO, rounding=ROUND_DOWN)


def cents_to_euros(cents: Optional[int]) -> Decimal:
    """Convert a minor-unit sum (as delivered by the ledgers) to EUR.

    Examples:
        123456 → Decimal("1234.56")
        None   → Decimal("0.00")
    """
    if cents is None:
        return ZERO.quantize(CENT)
    return quantize_cents(Decimal(cents) / HUNDRED)


def euros_to_cents(amount: Decimal) -> int:
    return int(quantize_cents(amount) * HUNDRED)
