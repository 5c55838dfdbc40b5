"""Row mapping, SELECT building and a generic repository base for SQLite.

Decimals are stored as TEXT and dates as ISO strings; RowMapper converts
them back using the dataclass type hints of the model.
"""

import dataclasses
import sqlite3
import typing
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Generic, Optional, TypeVar

from .database import Database, get_db

T = TypeVar("T")

_NO_VALUE = object()


def _default_of(f: dataclasses.Field):
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
        return f.default_factory()  # type: ignore[misc]
    return _NO_VALUE


class RowMapper(Generic[T]):
    """Builds dataclass instances from sqlite3.Row objects and back."""

    def __init__(self, model_class: type[T]):
        self._model_class = model_class
        self._fields = dataclasses.fields(model_class)  # type: ignore[arg-type]
        hints = typing.get_type_hints(model_class)
        self._converters = {f.name: self._converter_for(hints.get(f.name)) for f in self._fields}

    def _converter_for(self, hint):
        if hint is None:
            return None

        # Optional[X]
        if typing.get_origin(hint) is typing.Union:
            inner = [a for a in typing.get_args(hint) if a is not type(None)]
            return self._converter_for(inner[0]) if len(inner) == 1 else None

        if hint is Decimal:
            return lambda v: Decimal(str(v))
        if hint is datetime:
            return lambda v: datetime.fromisoformat(v) if isinstance(v, str) else v
        if hint is date:
            return lambda v: date.fromisoformat(v) if isinstance(v, str) else v
        if hint is bool:
            return bool
        if hint in (int, str):
            return hint
        if isinstance(hint, type) and issubclass(hint, Enum):
            return hint
        return None

    def map(self, row: sqlite3.Row) -> T:
        """Missing columns and NULLs fall back to the field default.

        A required field without a column raises TypeError from the model.
        """
        columns = row.keys()
        kwargs: dict = {}
        for f in self._fields:
            raw = row[f.name] if f.name in columns else None
            if raw is None:
                default = _default_of(f)
                if default is not _NO_VALUE:
                    kwargs[f.name] = default
                elif f.name in columns:
                    kwargs[f.name] = None
                continue
            conv = self._converters[f.name]
            kwargs[f.name] = conv(raw) if conv else raw
        return self._model_class(**kwargs)

    def map_all(self, rows) -> list[T]:
        return [self.map(r) for r in rows]

    @staticmethod
    def _serialize(val):
        if isinstance(val, Decimal):
            return str(val)
        if isinstance(val, (datetime, date)):
            return val.isoformat()
        if isinstance(val, Enum):
            return val.value
        return val

    def to_db_dict(self, obj: T, skip: frozenset = frozenset()) -> dict:
        return {
            f.name: self._serialize(getattr(obj, f.name))
            for f in self._fields
            if f.name not in skip
        }


class QueryBuilder:
    """Fluent SELECT builder with positional parameters."""

    def __init__(self, table: str):
        self._table = table
        self._columns: list[str] = ["*"]
        self._conditions: list[str] = []
        self._params: list = []
        self._order: Optional[str] = None

    def select(self, *columns: str) -> "QueryBuilder":
        self._columns = list(columns)
        return self

    def where(self, condition: str, *params) -> "QueryBuilder":
        self._conditions.append(condition)
        self._params.extend(params)
        return self

    def order_by(self, clause: str) -> "QueryBuilder":
        self._order = clause
        return self

    def build(self) -> tuple[str, list]:
        parts = [f"SELECT {', '.join(self._columns)} FROM {self._table}"]
        if self._conditions:
            parts.append("WHERE " + " AND ".join(self._conditions))
        if self._order:
            parts.append(f"ORDER BY {self._order}")
        return " ".join(parts), list(self._params)

    def fetch_one(self, conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
        sql, params = self.build()
        return conn.execute(sql, params).fetchone()

    def fetch_all(self, conn: sqlite3.Connection) -> list[sqlite3.Row]:
        sql, params = self.build()
        return conn.execute(sql, params).fetchall()


class BaseRepository(Generic[T]):
    """CRUD by integer id for tables mapped one-to-one onto a dataclass."""

    _table: str
    _mapper: RowMapper  # type: ignore[type-arg]
    _insert_skip: frozenset = frozenset({"id", "created_at", "updated_at"})

    def _db(self) -> Database:
        return get_db()

    def _commit(self, db: Database) -> None:
        if not db._in_transaction:
            db.conn.commit()

    def _query(self) -> QueryBuilder:
        return QueryBuilder(self._table)

    def get_by_id(self, id: int) -> Optional[T]:
        row = self._query().where("id = ?", id).fetch_one(self._db().conn)
        return self._mapper.map(row) if row else None

    def delete(self, id: int) -> bool:
        db = self._db()
        cursor = db.conn.execute(f"DELETE FROM {self._table} WHERE id = ?", (id,))
        self._commit(db)
        return cursor.rowcount > 0

    def _insert(self, obj: T) -> T:
        db = self._db()
        values = self._mapper.to_db_dict(obj, skip=self._insert_skip)
        cursor = db.conn.execute(
            f"INSERT INTO {self._table} ({', '.join(values)}) "
            f"VALUES ({', '.join('?' for _ in values)})",
            list(values.values()),
        )
        self._commit(db)
        return self.get_by_id(cursor.lastrowid)

    def save(self, obj: T) -> T:
        """UPDATE every writable column of obj by its id and touch updated_at."""
        db = self._db()
        values = self._mapper.to_db_dict(obj, skip=self._insert_skip)
        assignments = [f"{col} = ?" for col in values]
        if "updated_at" in self._mapper._converters:
            assignments.append("updated_at = CURRENT_TIMESTAMP")
        db.conn.execute(
            f"UPDATE {self._table} SET {', '.join(assignments)} WHERE id = ?",
            [*values.values(), obj.id],
        )
        self._commit(db)
        return self.get_by_id(obj.id)
