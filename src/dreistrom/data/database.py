"""SQLite storage for assets, allocation rules and invoice counters.

The database file lives next to pyproject.toml unless set_db_path() points
elsewhere. It runs in WAL mode so the invoice counter store can take the
write lock on its own connection while readers continue.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_DB_NAME = "dreistrom.db"

SCHEMA = """
CREATE TABLE IF NOT EXISTS allocation_rules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    freiberuf_pct INTEGER NOT NULL,
    gewerbe_pct INTEGER NOT NULL,
    personal_pct INTEGER NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CHECK (freiberuf_pct + gewerbe_pct + personal_pct = 100)
);

CREATE TABLE IF NOT EXISTS depreciable_assets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    acquisition_date DATE NOT NULL,
    net_cost TEXT NOT NULL,
    useful_life_months INTEGER NOT NULL CHECK (useful_life_months > 0),
    freiberuf_pct INTEGER DEFAULT NULL,
    gewerbe_pct INTEGER DEFAULT NULL,
    personal_pct INTEGER DEFAULT NULL,
    expense_id INTEGER DEFAULT NULL,
    disposal_date DATE DEFAULT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS invoice_sequences (
    stream TEXT NOT NULL,
    fiscal_year INTEGER NOT NULL,
    last_issued INTEGER NOT NULL DEFAULT 0,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (stream, fiscal_year)
);

CREATE INDEX IF NOT EXISTS idx_depreciable_assets_acquisition ON depreciable_assets(acquisition_date);
"""


class Database:
    def __init__(self, db_path: str = DEFAULT_DB_NAME):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._in_transaction: bool = False

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        return self._conn

    def initialize(self):
        """Create missing tables and switch the file to WAL journaling."""
        self.conn.execute("PRAGMA journal_mode = WAL")
        self.conn.executescript(SCHEMA)
        self.conn.commit()
        logger.debug("Database ready at %s", self.db_path)

    @contextmanager
    def transaction(self):
        """Group repository writes into one commit; roll all back on error."""
        self._in_transaction = True
        try:
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        finally:
            self._in_transaction = False

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None


# Process-wide instance, created lazily by get_db()
_db: Database | None = None


def _find_project_root() -> Path:
    """Directory holding pyproject.toml, searched upward from this module."""
    current = Path(__file__).resolve().parent
    for _ in range(10):
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return Path.cwd()


def get_db() -> Database:
    global _db
    if _db is None:
        _db = Database(str(_find_project_root() / DEFAULT_DB_NAME))
        _db.initialize()
    return _db


def set_db_path(path: str):
    global _db
    if _db:
        _db.close()
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    _db = Database(str(p))
    _db.initialize()
