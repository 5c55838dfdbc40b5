"""Straight-line depreciation (lineare AfA, § 7 Abs. 1 EStG).

Monatsprinzip: depreciation starts in the month of acquisition and every
started month counts in full. On disposal the disposal month is still
depreciated; nothing is recognised afterwards.

  monthly AfA      = net cost / useful life months   (not rounded)
  AfA for year Y   = monthly AfA × depreciable months in Y, rounded to 0.01
  final year       = net cost − AfA of all earlier years

The final year of a full-term asset absorbs the rounding remainder, so the
schedule of an asset that is never disposed sums exactly to its cost.

Assets at or below the GWG threshold (§ 6 Abs. 2 EStG, 800 EUR net) are
written off immediately as an expense and never become DepreciableAssets.
"""

import dataclasses
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from .allocation import allocate, sum_splits
from .exceptions import (
    AssetAlreadyDisposedError,
    ConfigurationError,
    DisposalBeforeAcquisitionError,
)
from .models import (
    AllocationRatio,
    DepreciableAsset,
    DepreciationScheduleEntry,
    StreamDepreciationSummary,
)
from .money import CENT, ZERO, Amount, quantize_cents, to_decimal

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

#: Geringwertige Wirtschaftsgüter limit (net) — § 6 Abs. 2 EStG
LOW_VALUE_ASSET_THRESHOLD = Decimal("800")


def _month_index(d: date) -> int:
    return d.year * 12 + d.month - 1


def _natural_end(asset: DepreciableAsset) -> int:
    """Month index of the last month of the useful life."""
    return _month_index(asset.acquisition_date) + asset.useful_life_months - 1


def _effective_end(asset: DepreciableAsset) -> int:
    end = _natural_end(asset)
    if asset.disposal_date is not None:
        end = min(end, _month_index(asset.disposal_date))
    return end


def _is_full_term(asset: DepreciableAsset) -> bool:
    return _effective_end(asset) == _natural_end(asset)


def _months_in_year(asset: DepreciableAsset, year: int, through_month: int = 12) -> int:
    """Depreciable months of `year` up to and including `through_month`."""
    start = max(_month_index(asset.acquisition_date), year * 12)
    end = min(_effective_end(asset), year * 12 + through_month - 1)
    return max(end - start + 1, 0)


def _monthly_amount(asset: DepreciableAsset) -> Decimal:
    return asset.net_cost / Decimal(asset.useful_life_months)


def _prorated(asset: DepreciableAsset, months: int) -> Decimal:
    return quantize_cents(_monthly_amount(asset) * months)


def depreciation_for_year(asset: DepreciableAsset, year: int) -> Decimal:
    """AfA attributable to `asset` in calendar year `year`.

    Examples:
        cost 3600, 36 months, acquired 2026-07-15:
            2026 → 600.00, 2027 → 1200.00, 2028 → 1200.00, 2029 → 600.00
    """
    months = _months_in_year(asset, year)
    if months == 0:
        return ZERO.quantize(CENT)

    last_year = _natural_end(asset) // 12
    if year == last_year and _is_full_term(asset):
        first_year = asset.acquisition_date.year
        earlier = sum(
            (_prorated(asset, _months_in_year(asset, y)) for y in range(first_year, year)),
            ZERO,
        )
        return quantize_cents(asset.net_cost - earlier)

    return _prorated(asset, months)


def remaining_book_value(asset: DepreciableAsset, as_of: date) -> Decimal:
    """Book value on `as_of`: cost minus AfA recognised through that month.

    Returns zero from the disposal date on, regardless of remaining life,
    and the full cost before the acquisition date.
    """
    if asset.disposal_date is not None and as_of >= asset.disposal_date:
        return ZERO.quantize(CENT)
    if as_of < asset.acquisition_date:
        return quantize_cents(asset.net_cost)

    cumulative = sum(
        (depreciation_for_year(asset, y) for y in range(asset.acquisition_date.year, as_of.year)),
        ZERO,
    )
    months_so_far = _months_in_year(asset, as_of.year, through_month=as_of.month)
    if months_so_far == _months_in_year(asset, as_of.year):
        cumulative += depreciation_for_year(asset, as_of.year)
    else:
        cumulative += _prorated(asset, months_so_far)

    return quantize_cents(max(asset.net_cost - cumulative, ZERO))


def schedule(asset: DepreciableAsset) -> list[DepreciationScheduleEntry]:
    """Year-by-year AfA from the acquisition year to full amortization or disposal.

    Each entry carries the book value on Dec 31. The disposal year ends at 0.
    """
    first_year = asset.acquisition_date.year
    last_year = _effective_end(asset) // 12
    disposal_year = asset.disposal_date.year if asset.disposal_date else None

    entries: list[DepreciationScheduleEntry] = []
    remaining = quantize_cents(asset.net_cost)
    for year in range(first_year, last_year + 1):
        amount = depreciation_for_year(asset, year)
        remaining = max(remaining - amount, ZERO.quantize(CENT))
        if year == disposal_year:
            remaining = ZERO.quantize(CENT)
        entries.append(DepreciationScheduleEntry(year=year, amount=amount, remaining_value=remaining))
    return entries


def dispose(asset: DepreciableAsset, disposal_date: date) -> DepreciableAsset:
    """Record the sale or retirement of an asset.

    Returns a new DepreciableAsset; the original is left untouched.

    Raises:
        AssetAlreadyDisposedError: the asset already has a disposal date.
        DisposalBeforeAcquisitionError: disposal_date precedes acquisition.
    """
    if asset.is_disposed:
        raise AssetAlreadyDisposedError(
            f"Asset already disposed on: {asset.disposal_date.isoformat()}"
        )
    if disposal_date < asset.acquisition_date:
        raise DisposalBeforeAcquisitionError(
            "Disposal date cannot be before acquisition date"
        )
    logger.info("Disposing asset %r on %s", asset.name, disposal_date.isoformat())
    return dataclasses.replace(asset, disposal_date=disposal_date)


def create_asset_from_expense(
    name: str,
    acquisition_date: date,
    net_cost: Amount,
    useful_life_months: int,
    ratio: Optional[AllocationRatio] = None,
    expense_id: Optional[int] = None,
    threshold: Decimal = LOW_VALUE_ASSET_THRESHOLD,
) -> Optional[DepreciableAsset]:
    """Turn a capital expense into a DepreciableAsset.

    Returns None for low-value assets (net cost ≤ threshold), which are
    deducted in full in the year of purchase.
    """
    cost = to_decimal(net_cost)
    if cost < 0:
        raise ConfigurationError(f"Net cost cannot be negative, got: {cost}")
    if cost <= threshold:
        return None
    return DepreciableAsset(
        name=name,
        acquisition_date=acquisition_date,
        net_cost=cost,
        useful_life_months=useful_life_months,
        ratio=ratio,
        expense_id=expense_id,
    )


def stream_totals_for_year(assets: Iterable[DepreciableAsset], year: int) -> StreamDepreciationSummary:
    """AfA of all assets for `year`, split per stream by each asset's ratio.

    Assets without a ratio are included in `total` only.
    """
    total = ZERO
    splits = []
    for asset in assets:
        amount = depreciation_for_year(asset, year)
        if amount == 0:
            continue
        total += amount
        if asset.ratio is not None:
            splits.append(allocate(amount, asset.ratio))

    combined = sum_splits(splits)
    return StreamDepreciationSummary(
        freiberuf=combined.freiberuf,
        gewerbe=combined.gewerbe,
        personal=combined.personal,
        total=quantize_cents(total),
    )
