"""Smoke tests for the dst command line."""

import sqlite3

from typer.testing import CliRunner

from dreistrom.cli.commands import invoice as invoice_cmd
from dreistrom.cli.main import app
from dreistrom.core.invoicing import InvoiceNumberGenerator
from dreistrom.data.repositories.assets_repo import AssetsRepository
from dreistrom.data.repositories.sequence_repo import SqliteCounterStore

runner = CliRunner()


class TestInvoiceCommands:
    def test_next(self, isolated_db):
        result = runner.invoke(app, ["invoice", "next", "freiberuf", "--year", "2026"])
        assert result.exit_code == 0
        assert "FR-2026-001" in result.output

        result = runner.invoke(app, ["invoice", "next", "freiberuf", "--year", "2026"])
        assert "FR-2026-002" in result.output

    def test_employment_rejected(self, isolated_db):
        result = runner.invoke(app, ["invoice", "next", "employment", "--year", "2026"])
        assert result.exit_code == 1

    def test_peek_on_busy_database(self, isolated_db, monkeypatch):
        monkeypatch.setattr(
            invoice_cmd, "_generator",
            lambda: InvoiceNumberGenerator(SqliteCounterStore(timeout=0.1)),
        )
        blocker = sqlite3.connect(isolated_db.db_path, isolation_level=None)
        blocker.execute("BEGIN IMMEDIATE")
        try:
            result = runner.invoke(app, ["invoice", "peek", "gewerbe", "--year", "2026"])
        finally:
            blocker.execute("ROLLBACK")
            blocker.close()
        assert result.exit_code == 1
        assert "Could not lock" in result.output


class TestTaxCommands:
    def test_income(self):
        result = runner.invoke(app, [
            "tax", "income", "--year", "2024",
            "--employment", "50000", "--freiberuf", "30000", "--freiberuf-expenses", "5000",
        ])
        assert result.exit_code == 0
        assert "20,366.00" in result.output

    def test_missing_year(self):
        result = runner.invoke(app, ["tax", "income", "--year", "2019", "--employment", "1"])
        assert result.exit_code == 1

    def test_invalid_amount(self):
        result = runner.invoke(app, ["tax", "soli", "abc", "--year", "2024"])
        assert result.exit_code == 1

    def test_trade_with_hebesatz(self):
        result = runner.invoke(app, ["tax", "trade", "60000", "--income-tax", "20000", "--hebesatz", "410"])
        assert result.exit_code == 0
        assert "5,094.25" in result.output


class TestVatCommands:
    def test_convert_gross(self):
        result = runner.invoke(app, ["vat", "convert", "1190"])
        assert result.exit_code == 0
        assert "1,000.00" in result.output
        assert "190.00" in result.output

    def test_convert_net_reduced(self):
        result = runner.invoke(app, ["vat", "convert", "100", "--rate", "7", "--from", "net"])
        assert result.exit_code == 0
        assert "107.00" in result.output


class TestAssetCommands:
    def test_add_and_list(self, isolated_db):
        result = runner.invoke(app, [
            "assets", "add", "Laptop", "3600", "--acquired", "2026-07-15", "--life", "36",
            "--ratio", "60/30/10",
        ])
        assert result.exit_code == 0
        assert len(AssetsRepository().list_all()) == 1

        result = runner.invoke(app, ["assets", "list", "--year", "2026"])
        assert result.exit_code == 0
        assert "600.00" in result.output

    def test_low_value_asset_not_stored(self, isolated_db):
        result = runner.invoke(app, [
            "assets", "add", "Mouse", "49", "--acquired", "2026-07-15", "--life", "36",
        ])
        assert result.exit_code == 0
        assert AssetsRepository().list_all() == []

    def test_bad_ratio(self, isolated_db):
        result = runner.invoke(app, [
            "assets", "add", "Laptop", "3600", "--acquired", "2026-07-15", "--life", "36",
            "--ratio", "60/30/20",
        ])
        assert result.exit_code == 1

    def test_rule_then_add(self, isolated_db):
        assert runner.invoke(app, ["assets", "rule-add", "Phone", "50/0/50"]).exit_code == 0
        result = runner.invoke(app, [
            "assets", "add", "Phone", "1000", "--acquired", "2026-01-01", "--life", "60",
            "--rule", "Phone",
        ])
        assert result.exit_code == 0
        assert AssetsRepository().list_all()[0].ratio.personal_pct == 50


class TestConfigCommands:
    def test_set_hebesatz(self, isolated_config):
        result = runner.invoke(app, ["config", "set", "--hebesatz", "490"])
        assert result.exit_code == 0
        assert '"hebesatz": 490' in isolated_config.read_text(encoding="utf-8")

    def test_hebesatz_minimum(self):
        result = runner.invoke(app, ["config", "set", "--hebesatz", "150"])
        assert result.exit_code == 1


class TestMoreCommands:
    def test_schedule_and_dispose(self, isolated_db):
        runner.invoke(app, ["assets", "add", "Laptop", "3600", "--acquired", "2026-07-15", "--life", "36"])
        asset_id = AssetsRepository().list_all()[0].id

        result = runner.invoke(app, ["assets", "schedule", str(asset_id)])
        assert result.exit_code == 0
        assert "2029" in result.output

        result = runner.invoke(app, ["assets", "dispose", str(asset_id), "--date", "2027-03-10"])
        assert result.exit_code == 0
        assert "300.00" in result.output

        result = runner.invoke(app, ["assets", "dispose", str(asset_id), "--date", "2027-04-01"])
        assert result.exit_code == 1

    def test_invoice_peek_and_list(self, isolated_db):
        result = runner.invoke(app, ["invoice", "peek", "gewerbe", "--year", "2026"])
        assert result.exit_code == 0
        assert "GW-2026-001" in result.output

        runner.invoke(app, ["invoice", "next", "gewerbe", "--year", "2026"])
        result = runner.invoke(app, ["invoice", "list"])
        assert result.exit_code == 0
        assert "GW-2026-001" in result.output

    def test_report_annual(self, tmp_path):
        input_file = tmp_path / "2024.json"
        input_file.write_text(
            '{"employment_income_cents": 4500000, "freiberuf_income_cents": 3000000,'
            ' "freiberuf_expenses_cents": 500000, "gewerbe_income_cents": 6000000}',
            encoding="utf-8",
        )
        result = runner.invoke(app, ["report", "annual", str(input_file), "--year", "2024"])
        assert result.exit_code == 0
        assert "43,466.00" in result.output

    def test_report_missing_file(self, tmp_path):
        result = runner.invoke(app, ["report", "annual", str(tmp_path / "nope.json"), "--year", "2024"])
        assert result.exit_code == 1

    def test_config_show(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "hebesatz" in result.output

    def test_reserve_past_year(self):
        result = runner.invoke(app, ["tax", "reserve", "20000", "--year", "2020"])
        assert result.exit_code == 0
        assert "6,000.00" in result.output


class TestCheckCommands:
    def test_vat_treatment_reverse_charge(self):
        result = runner.invoke(app, [
            "vat", "treatment", "AT", "--type", "b2b", "--ust-id", "ATU12345678",
        ])
        assert result.exit_code == 0
        assert "reverse_charge" in result.output
        assert "Zusammenfassende Meldung" in result.output

    def test_vat_treatment_third_country(self):
        result = runner.invoke(app, ["vat", "treatment", "US"])
        assert result.exit_code == 0
        assert "third_country" in result.output

    def test_thresholds(self):
        result = runner.invoke(app, [
            "tax", "thresholds", "--freiberuf", "60000", "--gewerbe", "30000", "--year", "2026",
        ])
        assert result.exit_code == 0
        # 30000 / 90000 = 0.3333
        assert "33.33%" in result.output
        assert "required" in result.output

    def test_home_office(self):
        result = runner.invoke(app, [
            "tax", "home-office", "--rent", "1200", "--utilities", "300",
            "--total-area", "80", "--office-area", "12", "--days", "150",
        ])
        assert result.exit_code == 0
        assert "€2,700.00" in result.output
        assert "€900.00" in result.output

    def test_home_office_invalid_area(self):
        result = runner.invoke(app, ["tax", "home-office", "--total-area", "0"])
        assert result.exit_code == 1
