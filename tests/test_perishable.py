"""Tests for the Perishable freshness wrapper."""

import threading
import time
from datetime import timedelta
from unittest.mock import MagicMock

from tempest_api.metrics import Perishable


class TestPerishable:

    def test_starts_expired(self, clock):
        cell = Perishable("value", clock=clock)
        assert cell.fresh() is None
        assert cell.is_fresh() is False

    def test_freshen_returns_value(self, clock):
        value = object()
        assert Perishable(value, clock=clock).freshen(10) is value

    def test_fresh_until_expiry(self, clock):
        cell = Perishable("value", clock=clock)
        cell.freshen(timedelta(seconds=10))
        assert cell.fresh() == "value"

        clock.advance(9.5)
        assert cell.fresh() == "value"

        clock.advance(0.5)
        assert cell.fresh() is None

    def test_falsy_value_is_still_fresh(self, clock):
        cell = Perishable(0, clock=clock)
        cell.freshen(1)
        assert cell.fresh() is not None
        assert cell.fresh() == 0

    def test_refreshing_extends_expiry(self, clock):
        cell = Perishable("value", clock=clock)
        cell.freshen(5)
        clock.advance(4)
        cell.freshen(5)
        clock.advance(4)
        assert cell.fresh() == "value"
        assert cell.expires_in == 1

    def test_shorter_freshen_replaces_expiry(self, clock):
        cell = Perishable("value", clock=clock)
        cell.freshen(60)
        cell.freshen(1)
        clock.advance(2)
        assert cell.fresh() is None

    def test_map_only_when_fresh(self, clock):
        f = MagicMock(return_value="mapped")
        cell = Perishable("value", clock=clock)

        assert cell.map(f) is None
        f.assert_not_called()

        cell.freshen(1)
        assert cell.map(f) == "mapped"
        f.assert_called_once_with("value")

    def test_real_clock_expiry(self):
        """Fresh right after a 50 ms freshen, stale after sleeping past it."""
        cell = Perishable(0)
        cell.freshen(timedelta(milliseconds=50))
        assert cell.fresh() is not None
        time.sleep(0.08)
        assert cell.fresh() is None

    def test_concurrent_readers_and_writer(self):
        cell = Perishable([])
        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                try:
                    cell.fresh()
                    cell.map(len)
                except Exception as e:  # pragma: no cover
                    errors.append(e)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for i in range(1000):
            cell.freshen(60).append(i)
        stop.set()
        for t in threads:
            t.join()

        assert errors == []
        assert len(cell.fresh()) == 1000
