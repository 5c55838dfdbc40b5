"""Integration tests for the SQLite invoice counter store."""

import sqlite3
import threading

import pytest

from dreistrom.core.exceptions import SequenceLockError
from dreistrom.core.invoicing import InvoiceNumberGenerator
from dreistrom.core.models import InvoiceStream
from dreistrom.data.repositories.sequence_repo import SqliteCounterStore


@pytest.fixture
def db_file(tmp_path):
    return str(tmp_path / "invoices.db")


class TestSqliteCounterStore:
    def test_consecutive_numbers(self, db_file):
        generator = InvoiceNumberGenerator(SqliteCounterStore(db_file))
        assert generator.next_invoice_number(InvoiceStream.FREIBERUF, 2026) == "FR-2026-001"
        assert generator.next_invoice_number(InvoiceStream.FREIBERUF, 2026) == "FR-2026-002"
        assert generator.next_invoice_number(InvoiceStream.GEWERBE, 2026) == "GW-2026-001"

    def test_persists_across_instances(self, db_file):
        InvoiceNumberGenerator(SqliteCounterStore(db_file)).next_invoice_number("freiberuf", 2026)
        generator = InvoiceNumberGenerator(SqliteCounterStore(db_file))
        assert generator.next_invoice_number("freiberuf", 2026) == "FR-2026-002"

    def test_default_database(self, isolated_db):
        store = SqliteCounterStore()
        assert store.db_path == isolated_db.db_path
        InvoiceNumberGenerator(store).next_invoice_number(InvoiceStream.GEWERBE, 2026)
        row = isolated_db.conn.execute(
            "SELECT last_issued FROM invoice_sequences WHERE stream = 'gewerbe'"
        ).fetchone()
        assert row["last_issued"] == 1

    def test_peek_creates_row_without_issuing(self, db_file):
        store = SqliteCounterStore(db_file)
        counter = InvoiceNumberGenerator(store).peek_or_create(InvoiceStream.FREIBERUF, 2027)
        assert counter.last_issued == 0
        assert [(c.stream, c.fiscal_year, c.last_issued) for c in store.list_all()] == [
            (InvoiceStream.FREIBERUF, 2027, 0),
        ]

    def test_list_all_order(self, db_file):
        store = SqliteCounterStore(db_file)
        generator = InvoiceNumberGenerator(store)
        generator.next_invoice_number(InvoiceStream.GEWERBE, 2026)
        generator.next_invoice_number(InvoiceStream.FREIBERUF, 2026)
        generator.next_invoice_number(InvoiceStream.FREIBERUF, 2027)
        keys = [(c.fiscal_year, c.stream) for c in store.list_all()]
        assert keys == [
            (2027, InvoiceStream.FREIBERUF),
            (2026, InvoiceStream.FREIBERUF),
            (2026, InvoiceStream.GEWERBE),
        ]

    def test_failed_block_rolls_back(self, db_file):
        store = SqliteCounterStore(db_file)
        with pytest.raises(RuntimeError):
            with store.locked_counter(InvoiceStream.FREIBERUF, 2026) as counter:
                counter.advance()
                raise RuntimeError("invoice not saved")
        assert InvoiceNumberGenerator(store).next_invoice_number(
            InvoiceStream.FREIBERUF, 2026
        ) == "FR-2026-001"

    def test_lock_timeout(self, db_file):
        store = SqliteCounterStore(db_file, timeout=0.1)
        blocker = sqlite3.connect(db_file, isolation_level=None)
        blocker.execute("BEGIN IMMEDIATE")
        try:
            with pytest.raises(SequenceLockError):
                InvoiceNumberGenerator(store).next_invoice_number(InvoiceStream.FREIBERUF, 2026)
        finally:
            blocker.execute("ROLLBACK")
            blocker.close()
        assert InvoiceNumberGenerator(store).next_invoice_number(
            InvoiceStream.FREIBERUF, 2026
        ) == "FR-2026-001"

    def test_concurrent_writers(self, db_file):
        store = SqliteCounterStore(db_file, timeout=30)
        generator = InvoiceNumberGenerator(store)
        results = []
        errors = []
        results_lock = threading.Lock()

        def worker():
            try:
                for _ in range(5):
                    number = generator.next_invoice_number(InvoiceStream.GEWERBE, 2026)
                    with results_lock:
                        results.append(number)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(results) == [f"GW-2026-{i:03d}" for i in range(1, 41)]
