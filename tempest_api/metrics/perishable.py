"""Values that go stale when they stop being refreshed."""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")

Duration = Union[timedelta, float]


def _seconds(duration: Duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


class Perishable(Generic[T]):
    """A value paired with an expiry instant.

    The wrapped value is readable through :meth:`fresh` only while the
    clock is before the expiry. The ingest path calls :meth:`freshen` on
    every update; the scrape path calls :meth:`fresh` / :meth:`map` at
    arbitrary times from another thread.

    Only the expiry is shared mutable state. It is guarded by a lock held
    for a single float store/load; the payload is never locked. A reader
    may briefly see a new expiry before the caller has written the new
    value into the payload.

    Usage:
        cell = Perishable(gauge)
        cell.freshen(timedelta(minutes=2)).set(21.5)   # ingest
        cell.map(lambda g: g.collect())                # scrape
    """

    def __init__(self, value: T, clock: Callable[[], float] = time.monotonic):
        self._value = value
        self._clock = clock
        self._expiry_lock = threading.Lock()
        # Born expired: nothing is fresh until the first freshen().
        self._expiry = clock()

    def freshen(self, duration: Duration) -> T:
        """Mark the value fresh for ``duration`` from now and return it."""
        expiry = self._clock() + _seconds(duration)
        with self._expiry_lock:
            self._expiry = expiry
        return self._value

    def is_fresh(self) -> bool:
        with self._expiry_lock:
            expiry = self._expiry
        return self._clock() < expiry

    def fresh(self) -> Optional[T]:
        """The value if still fresh, otherwise ``None``."""
        if self.is_fresh():
            return self._value
        return None

    def map(self, f: Callable[[T], U]) -> Optional[U]:
        """Apply ``f`` to the value only if it is fresh."""
        if self.is_fresh():
            return f(self._value)
        return None

    @property
    def expires_in(self) -> float:
        """Seconds until expiry (negative once stale)."""
        with self._expiry_lock:
            expiry = self._expiry
        return expiry - self._clock()
