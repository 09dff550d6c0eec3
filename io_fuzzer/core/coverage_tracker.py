"""Coverage Tracking - Named Signal Counters

CONCEPT: A coverage signal is a named indicator that some behaviour inside
the target was exercised. The tracker keeps a hit count per signal and lets
the fuzzing loop ask "did this execution touch anything we had not seen
before?".

Signals are never removed and counts never go down (``reset`` zeroes the
counts but keeps the names). The tracker is the one component shared between
worker threads, so every operation goes through a reader/writer lock: reads
run concurrently with each other, writes are exclusive, and each
read-modify-write on a key is a single critical section.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager

from io_fuzzer.core.exceptions import InvalidArgumentError
from io_fuzzer.utils.logger import get_logger

logger = get_logger(__name__)


class ReadWriteLock:
    """Many-readers / single-writer lock.

    Waiting writers block new readers so that a steady stream of reads
    cannot starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode."""
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock in exclusive mode."""
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def _check_name(signal_name: str) -> None:
    if not signal_name:
        raise InvalidArgumentError("signal_name", "Signal name must be non-empty")


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise InvalidArgumentError(
            "amount", "Hit counts never decrease", context={"amount": amount}
        )


class CoverageTracker:
    """Thread-safe mapping from signal name to hit count.

    Args:
        name: Name of the component being tracked (used in log context)
        signals: Signals to initialise with a zero count

    """

    def __init__(self, name: str = "default", signals: Iterable[str] = ()) -> None:
        self.name = name
        self._counts: dict[str, int] = {}
        self._lock = ReadWriteLock()
        self.initialize_many(signals)

    # Writes

    def initialize(self, signal_name: str) -> None:
        """Create a zero entry for ``signal_name`` if it is not known yet."""
        _check_name(signal_name)
        with self._lock.write_locked():
            self._counts.setdefault(signal_name, 0)

    def initialize_many(self, signal_names: Iterable[str]) -> None:
        """Create zero entries for several signals under one write lock."""
        names = list(signal_names)
        for signal_name in names:
            _check_name(signal_name)
        with self._lock.write_locked():
            for signal_name in names:
                self._counts.setdefault(signal_name, 0)

    def increment(self, signal_name: str, amount: int = 1) -> int:
        """Add ``amount`` hits to a signal, creating it if needed.

        Returns:
            The new hit count

        """
        _check_name(signal_name)
        _check_amount(amount)
        with self._lock.write_locked():
            count = self._counts.get(signal_name, 0) + amount
            self._counts[signal_name] = count
        return count

    def update_coverage(self, signal_names: Iterable[str]) -> set[str]:
        """Record one hit for each signal touched by an execution.

        Returns:
            Signals that had never been hit before this call

        """
        names = set(signal_names)
        for signal_name in names:
            _check_name(signal_name)

        new_signals: set[str] = set()
        with self._lock.write_locked():
            for signal_name in names:
                previous = self._counts.get(signal_name, 0)
                if previous == 0:
                    new_signals.add(signal_name)
                self._counts[signal_name] = previous + 1

        if new_signals:
            logger.debug(
                "new_coverage_discovered",
                tracker=self.name,
                new_signals=len(new_signals),
            )
        return new_signals

    def merge(self, other: CoverageTracker | Mapping[str, int]) -> None:
        """Add another signal set into this one, summing counts per key."""
        if other is None:
            raise InvalidArgumentError("other", "Nothing to merge")

        # Snapshot first: never hold our write lock while reading the other tracker
        if isinstance(other, CoverageTracker):
            incoming = other.snapshot()
        else:
            incoming = dict(other)
        for signal_name, count in incoming.items():
            _check_name(signal_name)
            _check_amount(count)

        with self._lock.write_locked():
            for signal_name, count in incoming.items():
                self._counts[signal_name] = self._counts.get(signal_name, 0) + count

        logger.debug("coverage_merged", tracker=self.name, merged_signals=len(incoming))

    def reset(self) -> None:
        """Zero every count, keeping the known signal names."""
        with self._lock.write_locked():
            for signal_name in self._counts:
                self._counts[signal_name] = 0
        logger.info("coverage_tracker_reset", tracker=self.name)

    # Reads

    def get(self, signal_name: str) -> int:
        """Return the hit count of a signal (0 if unknown)."""
        with self._lock.read_locked():
            return self._counts.get(signal_name, 0)

    def snapshot(self) -> dict[str, int]:
        """Return a copy of every signal and its hit count."""
        with self._lock.read_locked():
            return dict(self._counts)

    def covered_count(self) -> int:
        """Return the number of signals hit at least once."""
        with self._lock.read_locked():
            return sum(1 for count in self._counts.values() if count > 0)

    def percentage_covered(self) -> float:
        """Return the share of known signals that were hit, as a percentage.

        Signals that were initialised but never hit count as not covered.
        An empty tracker reports 0.0.
        """
        with self._lock.read_locked():
            if not self._counts:
                return 0.0
            hit = sum(1 for count in self._counts.values() if count > 0)
            return hit / len(self._counts) * 100.0

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._counts)

    def __contains__(self, signal_name: object) -> bool:
        with self._lock.read_locked():
            return signal_name in self._counts
