"""Tests for core.tax.gewerbesteuer.

  Steuermessbetrag = max(0, profit − 24500) × 3.5 %
  Gewerbesteuer    = Steuermessbetrag × Hebesatz / 100
  § 35 credit      = min(4.0 × Steuermessbetrag, income tax)
"""

from decimal import Decimal

from dreistrom.core.config import AppConfig, save_config
from dreistrom.core.tax.gewerbesteuer import (
    TradeTaxParameters,
    abfaerbung_status,
    compute_trade_tax,
    gewerbe_profit,
    trade_tax_threshold_status,
)

PARAMS = TradeTaxParameters(hebesatz=410)


class TestComputeTradeTax:
    def test_reference_case(self):
        # (60000 − 24500) × 0.035 = 1242.50; × 4.10 = 5094.25; credit 4 × 1242.50
        result = compute_trade_tax(60000, 0, 20000, PARAMS)
        assert result.profit == Decimal("60000")
        assert result.taxable_profit == Decimal("35500")
        assert result.assessment_base == Decimal("1242.50")
        assert result.trade_tax == Decimal("5094.25")
        assert result.credit == Decimal("4970.00")
        assert result.net_burden == Decimal("124.25")

    def test_below_allowance(self):
        result = compute_trade_tax(30000, 10000, 20000, PARAMS)
        assert result.taxable_profit == Decimal("0")
        assert result.trade_tax == Decimal("0.00")
        assert result.credit == Decimal("0.00")
        assert result.net_burden == Decimal("0")

    def test_expenses_reduce_profit(self):
        # profit 40000 → taxable 15500 → base 542.50 → tax 2224.25
        result = compute_trade_tax(60000, 20000, 50000, PARAMS)
        assert result.profit == Decimal("40000")
        assert result.assessment_base == Decimal("542.50")
        assert result.trade_tax == Decimal("2224.25")

    def test_credit_capped_by_income_tax(self):
        result = compute_trade_tax(60000, 0, 1000, PARAMS)
        assert result.credit == Decimal("1000")
        assert result.net_burden == Decimal("4094.25")

    def test_negative_income_tax_gives_no_credit(self):
        result = compute_trade_tax(60000, 0, -500, PARAMS)
        assert result.credit == Decimal("0")

    def test_credit_never_exceeds_four_times_base(self):
        for revenue in (25000, 50000, 123456, 400000):
            result = compute_trade_tax(revenue, 0, 10 ** 6, PARAMS)
            assert result.credit <= 4 * result.assessment_base
            assert result.net_burden >= 0

    def test_loss_is_zero_profit(self):
        assert compute_trade_tax(1000, 5000, 0, PARAMS).profit == Decimal("0")

    def test_hebesatz_from_config(self):
        save_config(AppConfig(hebesatz=490))
        result = compute_trade_tax(60000, 0, 20000)
        # 1242.50 × 4.90 = 6088.25
        assert result.hebesatz == 490
        assert result.trade_tax == Decimal("6088.25")


class TestGewerbeProfit:
    def test_simple(self):
        assert gewerbe_profit(1000, 400) == Decimal("600")

    def test_never_negative(self):
        assert gewerbe_profit(100, 400) == Decimal("0")


class TestThresholdStatus:
    def test_small_business(self):
        status = trade_tax_threshold_status(30000, 10000)
        assert status.profit == Decimal("20000")
        assert not status.above_allowance
        assert not status.bilanzierungspflicht

    def test_uses_real_profit(self):
        # revenue alone is above the allowance, profit is not
        status = trade_tax_threshold_status(40000, 20000)
        assert not status.above_allowance

    def test_revenue_threshold(self):
        status = trade_tax_threshold_status(900000, 850000)
        assert status.above_allowance
        assert status.bilanzierung_revenue_exceeded
        assert not status.bilanzierung_profit_exceeded
        assert status.bilanzierungspflicht

    def test_profit_threshold(self):
        status = trade_tax_threshold_status(100000, 10000)
        assert status.bilanzierung_profit_exceeded
        assert status.bilanzierungspflicht


class TestTradeTaxProperties:
    def test_monotonic_in_profit(self):
        previous = Decimal("0")
        for revenue in range(0, 200001, 2500):
            tax = compute_trade_tax(revenue, 0, 0, PARAMS).trade_tax
            assert tax >= previous, revenue
            previous = tax

    def test_credit_bounded_by_income_tax(self):
        for income_tax in (0, 100, 2000, 4970, 10000):
            result = compute_trade_tax(60000, 0, income_tax, PARAMS)
            assert result.credit <= income_tax
            assert result.credit <= 4 * result.assessment_base


class TestAbfaerbung:
    def test_both_limits_exceeded(self, caplog):
        with caplog.at_level("WARNING", logger="dreistrom.core.tax.gewerbesteuer"):
            status = abfaerbung_status(30000, 90000, 2026)
        # 30000 / 90000 = 0.3333
        assert status.ratio == Decimal("0.3333")
        assert status.threshold_exceeded
        assert "Abfärbung" in caplog.text

    def test_small_share(self):
        # 30000 / 2000000 = 1.5 %
        status = abfaerbung_status(30000, 2000000, 2026)
        assert status.ratio == Decimal("0.0150")
        assert not status.threshold_exceeded

    def test_small_amount(self):
        status = abfaerbung_status(20000, 40000, 2026)
        assert status.ratio == Decimal("0.5000")
        assert not status.threshold_exceeded

    def test_amount_limit_is_exclusive(self):
        assert not abfaerbung_status(24500, 50000, 2026).threshold_exceeded
        assert abfaerbung_status("24500.01", 50000, 2026).threshold_exceeded

    def test_no_gewerbe(self):
        status = abfaerbung_status(0, 80000, 2026)
        assert status.ratio == Decimal("0.0000")
        assert not status.threshold_exceeded
