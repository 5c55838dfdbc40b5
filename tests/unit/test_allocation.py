"""Tests for core.allocation."""

from decimal import Decimal

import pytest

from dreistrom.core.allocation import allocate, sum_splits
from dreistrom.core.exceptions import InvalidAllocationError
from dreistrom.core.models import AllocationRatio, AllocationSplit

RATIO = AllocationRatio(60, 30, 10)


class TestAllocationRatio:
    def test_valid(self):
        assert RATIO.business_pct == 90

    def test_must_sum_to_100(self):
        with pytest.raises(InvalidAllocationError, match="sum to 100"):
            AllocationRatio(60, 30, 20)

    def test_no_negative_parts(self):
        with pytest.raises(InvalidAllocationError):
            AllocationRatio(-10, 100, 10)

    def test_single_stream(self):
        assert AllocationRatio(0, 100, 0).gewerbe_pct == 100


class TestAllocate:
    def test_even_split(self):
        split = allocate(1000, RATIO)
        assert split.freiberuf == Decimal("600.00")
        assert split.gewerbe == Decimal("300.00")
        assert split.personal == Decimal("100.00")
        assert split.business == Decimal("900.00")

    def test_none_amount(self):
        split = allocate(None, RATIO)
        assert split == AllocationSplit(Decimal("0.00"), Decimal("0.00"), Decimal("0.00"))

    def test_each_share_rounded_on_its_own(self):
        # 10.01 × 33 % = 3.3033, × 34 % = 3.4034 → shares sum to 10.00
        split = allocate(Decimal("10.01"), AllocationRatio(33, 33, 34))
        assert (split.freiberuf, split.gewerbe, split.personal) == (
            Decimal("3.30"), Decimal("3.30"), Decimal("3.40"),
        )

    def test_half_up(self):
        # 0.05 × 50 % = 0.025 → 0.03
        split = allocate(Decimal("0.05"), AllocationRatio(50, 50, 0))
        assert split.freiberuf == Decimal("0.03")


class TestSumSplits:
    def test_sum_splits(self):
        combined = sum_splits([allocate(100, RATIO), allocate(50, RATIO)])
        assert combined.freiberuf == Decimal("90.00")


class TestConservation:
    @pytest.mark.parametrize("amount", ["0.01", "10.01", "99.99", "1234.57", "100000.03"])
    @pytest.mark.parametrize("ratio", [
        AllocationRatio(60, 30, 10),
        AllocationRatio(33, 33, 34),
        AllocationRatio(1, 1, 98),
        AllocationRatio(0, 0, 100),
    ])
    def test_shares_sum_to_amount(self, amount, ratio):
        split = allocate(Decimal(amount), ratio)
        total = split.freiberuf + split.gewerbe + split.personal
        # at most half a cent of rounding per share
        assert abs(total - Decimal(amount)) <= Decimal("0.015")
