"""Gap-free invoice numbering per (stream, fiscal year).

§ 14 Abs. 4 Nr. 4 UStG requires a unique, consecutive invoice number.
Numbers look like ``FR-2026-001`` (Freiberuf) or ``GW-2026-014`` (Gewerbe);
the ordinal restarts at 1 every fiscal year and is never reused.

The counter row for a key is read, incremented and written while an
exclusive lock on that key is held, so concurrent callers each receive a
distinct ordinal. The lock is released when the number has been persisted.
"""

import dataclasses
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Union

from .exceptions import SequenceLockError
from .models import IncomeStream, InvoiceSequenceCounter, InvoiceStream

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

#: Seconds to wait for a counter lock before giving up
DEFAULT_LOCK_TIMEOUT = 5.0

StreamLike = Union[InvoiceStream, IncomeStream, str]


def _as_invoice_stream(stream: StreamLike) -> InvoiceStream:
    if isinstance(stream, InvoiceStream):
        return stream
    return InvoiceStream.from_income_stream(IncomeStream(stream))


def format_invoice_number(stream: InvoiceStream, year: int, ordinal: int) -> str:
    """Examples:
        format_invoice_number(FREIBERUF, 2026, 1)    → "FR-2026-001"
        format_invoice_number(GEWERBE, 2026, 1234)   → "GW-2026-1234"
    """
    return f"{stream.prefix}-{year}-{ordinal:03d}"


class CounterStore(ABC):
    """Lock-capable storage for invoice sequence counters."""

    @abstractmethod
    def locked_counter(self, stream: InvoiceStream, year: int):
        """Context manager yielding the counter for (stream, year) under an
        exclusive lock.

        The counter is created with no numbers issued if it does not exist.
        Changes are persisted when the block exits normally and discarded
        when it raises.

        Raises:
            SequenceLockError: the lock could not be acquired.
        """


class InMemoryCounterStore(CounterStore):
    """Process-local store with one threading.Lock per key."""

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.lock_timeout = lock_timeout
        self._counters: dict[tuple[InvoiceStream, int], InvoiceSequenceCounter] = {}
        self._locks: dict[tuple[InvoiceStream, int], threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: tuple[InvoiceStream, int]) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def locked_counter(self, stream: InvoiceStream, year: int) -> Iterator[InvoiceSequenceCounter]:
        key = (stream, year)
        lock = self._lock_for(key)
        if not lock.acquire(timeout=self.lock_timeout):
            raise SequenceLockError(
                f"Timed out waiting for invoice counter lock: {stream.value}/{year}"
            )
        try:
            stored = self._counters.get(key)
            if stored is None:
                stored = InvoiceSequenceCounter(stream=stream, fiscal_year=year)
            working = dataclasses.replace(stored)
            yield working
            self._counters[key] = working
        finally:
            lock.release()


class InvoiceNumberGenerator:
    """Issues invoice numbers from a CounterStore."""

    def __init__(self, store: CounterStore):
        self.store = store

    def peek_or_create(self, stream: StreamLike, year: int) -> InvoiceSequenceCounter:
        """Current counter for (stream, year), created with nothing issued if absent.

        Raises:
            UnsupportedStreamError: stream is employment.
        """
        s = _as_invoice_stream(stream)
        with self.store.locked_counter(s, year) as counter:
            return dataclasses.replace(counter)

    def next_invoice_number(self, stream: StreamLike, year: int) -> str:
        """Reserve and return the next invoice number for (stream, year).

        Raises:
            UnsupportedStreamError: stream is employment.
            SequenceLockError: the counter lock could not be acquired.
                Safe to retry.
        """
        s = _as_invoice_stream(stream)
        try:
            with self.store.locked_counter(s, year) as counter:
                ordinal = counter.advance()
        except SequenceLockError:
            logger.warning("Invoice counter %s/%d is locked", s.value, year)
            raise
        number = format_invoice_number(s, year, ordinal)
        logger.info("Issued invoice number %s", number)
        return number
