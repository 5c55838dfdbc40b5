"""Tests for query.py: RowMapper, QueryBuilder, BaseRepository."""

import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from dreistrom.core.models import AllocationRatio, AllocationRule, InvoiceSequenceCounter, InvoiceStream
from dreistrom.data.query import QueryBuilder, RowMapper
from dreistrom.data.repositories.allocation_repo import AllocationRulesRepository


@dataclass
class LedgerLine:
    id: int
    booked_on: date
    amount: Decimal
    vat: Optional[Decimal] = None
    memo: str = ""


def _make_row(**kwargs) -> sqlite3.Row:
    """Create a sqlite3.Row from keyword arguments.

    The connection is kept alive implicitly: sqlite3.Row holds a reference
    to the cursor (which holds a reference to the connection), so the
    connection is not GC'd while the Row is alive.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    col_exprs = ", ".join(f"? as {name}" for name in kwargs)
    return conn.execute(f"SELECT {col_exprs}", list(kwargs.values())).fetchone()


# ---------------------------------------------------------------------------
# TestRowMapper
# ---------------------------------------------------------------------------

class TestRowMapper:
    def test_basic_rule_mapping(self):
        """int, str, and Optional[datetime] fields are mapped correctly."""
        mapper = RowMapper(AllocationRule)
        row = _make_row(
            id=1, name="Laptop",
            freiberuf_pct=60, gewerbe_pct=30, personal_pct=10,
            created_at="2026-01-15 10:00:00", updated_at="2026-01-16 10:00:00",
        )
        rule = mapper.map(row)
        assert rule.id == 1
        assert rule.name == "Laptop"
        assert rule.ratio == AllocationRatio(60, 30, 10)
        assert isinstance(rule.created_at, datetime)
        assert rule.created_at.year == 2026

    def test_enum_conversion(self):
        """Enum-typed field is converted from its string value."""
        mapper = RowMapper(InvoiceSequenceCounter)
        counter = mapper.map(_make_row(stream="gewerbe", fiscal_year=2026, last_issued=14))
        assert counter.stream is InvoiceStream.GEWERBE
        assert counter.last_issued == 14

    def test_date_conversion(self):
        mapper = RowMapper(LedgerLine)
        line = mapper.map(_make_row(id=1, booked_on="2026-03-05", amount="119.00", vat=None, memo=None))
        assert line.booked_on == date(2026, 3, 5)

    def test_decimal_conversion(self):
        """TEXT Decimal columns are converted to Decimal without precision loss."""
        mapper = RowMapper(LedgerLine)
        line = mapper.map(_make_row(
            id=1, booked_on="2026-03-05", amount="123.456789012345", vat="19.00", memo="",
        ))
        assert line.amount == Decimal("123.456789012345")
        assert line.vat == Decimal("19.00")

    def test_optional_decimal_null(self):
        """Optional[Decimal] = None with NULL column → None."""
        mapper = RowMapper(LedgerLine)
        line = mapper.map(_make_row(id=1, booked_on="2026-03-05", amount="1", vat=None, memo=""))
        assert line.vat is None

    def test_str_default_for_null_column(self):
        """str = '' field with NULL in the DB row → uses the '' default."""
        mapper = RowMapper(LedgerLine)
        line = mapper.map(_make_row(id=1, booked_on="2026-03-05", amount="1", vat=None, memo=None))
        assert line.memo == ""

    def test_field_not_in_row_uses_default(self):
        mapper = RowMapper(InvoiceSequenceCounter)
        counter = mapper.map(_make_row(stream="freiberuf", fiscal_year=2026))
        assert counter.last_issued == 0

    def test_field_not_in_row_no_default_raises(self):
        """Required field missing from row → TypeError on construction."""
        mapper = RowMapper(InvoiceSequenceCounter)
        with pytest.raises(TypeError):
            mapper.map(_make_row(stream="freiberuf", last_issued=3))

    def test_map_all(self):
        mapper = RowMapper(InvoiceSequenceCounter)
        rows = [
            _make_row(stream="freiberuf", fiscal_year=2026, last_issued=3),
            _make_row(stream="gewerbe", fiscal_year=2026, last_issued=1),
        ]
        counters = mapper.map_all(rows)
        assert [c.stream for c in counters] == [InvoiceStream.FREIBERUF, InvoiceStream.GEWERBE]

    def test_serialize_decimal(self):
        assert RowMapper._serialize(Decimal("123.456")) == "123.456"

    def test_serialize_dates(self):
        assert RowMapper._serialize(datetime(2026, 6, 15, 10, 30, 0)) == "2026-06-15T10:30:00"
        assert RowMapper._serialize(date(2026, 6, 15)) == "2026-06-15"

    def test_serialize_enum(self):
        assert RowMapper._serialize(InvoiceStream.FREIBERUF) == "freiberuf"

    def test_serialize_none(self):
        assert RowMapper._serialize(None) is None

    def test_serialize_primitives(self):
        assert RowMapper._serialize(42) == 42
        assert RowMapper._serialize("hello") == "hello"
        assert RowMapper._serialize(True) is True

    def test_to_db_dict_skips_fields(self):
        """Fields in skip set are excluded from the result."""
        mapper = RowMapper(AllocationRule)
        rule = AllocationRule(name="Phone", freiberuf_pct=50, gewerbe_pct=0, personal_pct=50)
        d = mapper.to_db_dict(rule, skip=frozenset({"id", "created_at", "updated_at"}))
        assert d == {"name": "Phone", "freiberuf_pct": 50, "gewerbe_pct": 0, "personal_pct": 50}


# ---------------------------------------------------------------------------
# TestQueryBuilder
# ---------------------------------------------------------------------------

class TestQueryBuilder:
    def test_default_is_select_star(self):
        sql, params = QueryBuilder("allocation_rules").build()
        assert sql == "SELECT * FROM allocation_rules"
        assert params == []

    def test_multiple_where_joined_with_and(self):
        sql, params = (
            QueryBuilder("invoice_sequences")
            .where("stream = ?", "freiberuf")
            .where("fiscal_year = ?", 2026)
            .build()
        )
        assert "WHERE stream = ? AND fiscal_year = ?" in sql
        assert params == ["freiberuf", 2026]

    def test_order_by_appended(self):
        sql, _ = QueryBuilder("depreciable_assets").order_by("acquisition_date DESC").build()
        assert sql.endswith("ORDER BY acquisition_date DESC")

    def test_select_specific_columns(self):
        sql, _ = QueryBuilder("invoice_sequences").select("stream", "last_issued").build()
        assert sql == "SELECT stream, last_issued FROM invoice_sequences"


# ---------------------------------------------------------------------------
# TestBaseRepository
# ---------------------------------------------------------------------------

class TestBaseRepository:
    """Uses AllocationRulesRepository as a concrete BaseRepository implementation."""

    def test_insert_returns_model(self, isolated_db):
        rule = AllocationRulesRepository().create("Laptop", AllocationRatio(60, 30, 10))
        assert rule.id is not None
        assert rule.ratio == AllocationRatio(60, 30, 10)
        assert isinstance(rule.created_at, datetime)

    def test_get_by_id_missing_returns_none(self, isolated_db):
        assert AllocationRulesRepository().get_by_id(9999) is None

    def test_delete(self, isolated_db):
        repo = AllocationRulesRepository()
        rule = repo.create("Phone", AllocationRatio(50, 0, 50))
        assert repo.delete(rule.id) is True
        assert repo.get_by_id(rule.id) is None
        assert repo.delete(rule.id) is False

    def test_save_updates_fields(self, isolated_db):
        repo = AllocationRulesRepository()
        rule = repo.create("Home office", AllocationRatio(50, 20, 30))
        saved = repo.update_ratio(rule, AllocationRatio(70, 0, 30))
        assert saved.freiberuf_pct == 70
        assert repo.get_by_name("Home office").gewerbe_pct == 0
        assert saved.updated_at is not None
