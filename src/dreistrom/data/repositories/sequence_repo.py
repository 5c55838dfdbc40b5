"""SQLite-backed invoice sequence counters.

Each locked_counter() call opens its own connection and starts the
transaction with BEGIN IMMEDIATE, which takes the database write lock before
the counter row is read. A second writer waits up to `timeout` seconds and
then fails with SequenceLockError; the read-increment-write cycle is never
interleaved.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from ...core.exceptions import SequenceLockError
from ...core.invoicing import DEFAULT_LOCK_TIMEOUT, CounterStore
from ...core.models import InvoiceSequenceCounter, InvoiceStream
from ..database import Database, get_db
from ..query import QueryBuilder, RowMapper

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class SqliteCounterStore(CounterStore):
    _mapper = RowMapper(InvoiceSequenceCounter)

    def __init__(self, db_path: Optional[str] = None, timeout: float = DEFAULT_LOCK_TIMEOUT):
        if db_path is None:
            db_path = get_db().db_path
        else:
            db = Database(db_path)
            db.initialize()
            db.close()
        self.db_path = db_path
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        # Autocommit mode: transactions are opened explicitly below.
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def locked_counter(self, stream: InvoiceStream, year: int) -> Iterator[InvoiceSequenceCounter]:
        conn = self._connect()
        try:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.OperationalError as e:
                logger.debug("BEGIN IMMEDIATE failed for %s/%d: %s", stream.value, year, e)
                raise SequenceLockError(
                    f"Could not lock invoice counter {stream.value}/{year}: {e}"
                ) from e
            try:
                conn.execute(
                    "INSERT OR IGNORE INTO invoice_sequences (stream, fiscal_year) VALUES (?, ?)",
                    (stream.value, year),
                )
                row = (
                    QueryBuilder("invoice_sequences")
                    .select("stream", "fiscal_year", "last_issued")
                    .where("stream = ?", stream.value)
                    .where("fiscal_year = ?", year)
                    .fetch_one(conn)
                )
                counter = self._mapper.map(row)
                yield counter
                conn.execute(
                    """UPDATE invoice_sequences
                       SET last_issued = ?, updated_at = CURRENT_TIMESTAMP
                       WHERE stream = ? AND fiscal_year = ?""",
                    (counter.last_issued, stream.value, year),
                )
                conn.execute("COMMIT")
            except sqlite3.OperationalError as e:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise SequenceLockError(
                    f"Invoice counter {stream.value}/{year} could not be written: {e}"
                ) from e
            except Exception:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()

    def list_all(self) -> list[InvoiceSequenceCounter]:
        conn = self._connect()
        try:
            rows = (
                QueryBuilder("invoice_sequences")
                .select("stream", "fiscal_year", "last_issued")
                .order_by("fiscal_year DESC, stream ASC")
                .fetch_all(conn)
            )
            return self._mapper.map_all(rows)
        finally:
            conn.close()
