"""Allocation of shared amounts across Freiberuf, Gewerbe and personal use.

Each share is amount × pct / 100, rounded half-up to the cent on its own.
The three shares may therefore differ from the original amount by at most
one cent per share; no share absorbs the difference.
"""

from decimal import Decimal
from typing import Iterable, Optional

from .models import AllocationRatio, AllocationSplit
from .money import HUNDRED, ZERO, Amount, quantize_cents, to_decimal


def allocate(amount: Optional[Amount], ratio: AllocationRatio) -> AllocationSplit:
    """Split an amount by an allocation ratio.

    Examples:
        allocate(1000, 60/30/10) → (600.00, 300.00, 100.00)
        allocate(None, ratio)     → (0.00, 0.00, 0.00)
    """
    value = to_decimal(amount)
    return AllocationSplit(
        freiberuf=_share(value, ratio.freiberuf_pct),
        gewerbe=_share(value, ratio.gewerbe_pct),
        personal=_share(value, ratio.personal_pct),
    )


def _share(amount: Decimal, pct: int) -> Decimal:
    return quantize_cents(amount * Decimal(pct) / HUNDRED)


def sum_splits(splits: Iterable[AllocationSplit]) -> AllocationSplit:
    freiberuf = gewerbe = personal = ZERO
    for s in splits:
        freiberuf += s.freiberuf
        gewerbe += s.gewerbe
        personal += s.personal
    return AllocationSplit(
        freiberuf=quantize_cents(freiberuf),
        gewerbe=quantize_cents(gewerbe),
        personal=quantize_cents(personal),
    )

