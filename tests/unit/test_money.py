"""Tests for core.money."""

from decimal import Decimal

from dreistrom.core.money import (
    cents_to_euros,
    euros_to_cents,
    quantize_cents,
    to_decimal,
    truncate_euros,
)


class TestToDecimal:
    def test_none(self):
        assert to_decimal(None) == Decimal("0")

    def test_int_and_str(self):
        assert to_decimal(12) == Decimal("12")
        assert to_decimal("12.50") == Decimal("12.50")

    def test_decimal_passthrough(self):
        value = Decimal("1.005")
        assert to_decimal(value) is value


class TestRounding:
    def test_quantize_half_up(self):
        assert quantize_cents(Decimal("2.345")) == Decimal("2.35")
        assert quantize_cents(Decimal("-2.345")) == Decimal("-2.35")

    def test_truncate(self):
        assert truncate_euros(Decimal("99.99")) == Decimal("99")
        assert truncate_euros(Decimal("-1.5")) == Decimal("-1")


class TestCents:
    def test_cents_to_euros(self):
        assert cents_to_euros(123456) == Decimal("1234.56")
        assert cents_to_euros(None) == Decimal("0.00")

    def test_euros_to_cents(self):
        assert euros_to_cents(Decimal("12.345")) == 1235
