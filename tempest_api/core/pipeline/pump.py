"""Fan-out of decoded messages to every sink."""

from __future__ import annotations

import logging
import threading
import time
from typing import Iterable, Optional, Protocol, Sequence

from ..domain import TempestMessage
from ..monitoring import Stats

logger = logging.getLogger(__name__)


class ReportSink(Protocol):
    def handle_report(self, message: TempestMessage) -> None:
        ...


class MessagePump:
    """Pulls decoded messages and hands each one to every sink in order.

    A sink that raises is logged and skipped for that message; the other
    sinks and the following messages are unaffected. ``stop()`` takes
    effect between two messages.

    Usage:
        pump = MessagePump(decode_stream(read_stream(receiver)), [exporter])
        pump.start()
        ...
        pump.stop()
    """

    def __init__(
        self,
        messages: Iterable[TempestMessage],
        sinks: Sequence[ReportSink],
        stats: Optional[Stats] = None,
    ):
        self._messages = messages
        self._sinks = list(sinks)
        self._stats = stats
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.dispatched = 0
        self.sink_errors = 0
        self.first_message_at: Optional[float] = None
        self.last_message_at: Optional[float] = None

    def run(self) -> None:
        """Dispatch until the upstream is exhausted or ``stop()`` is called."""
        logger.info("[PUMP] Started with %d sink(s)", len(self._sinks))
        for message in self._messages:
            now = time.time()
            if self.first_message_at is None:
                self.first_message_at = now
            self.last_message_at = now
            if self._stats is not None:
                self._stats.last_message_at = now

            for sink in self._sinks:
                try:
                    sink.handle_report(message)
                except Exception:
                    self.sink_errors += 1
                    logger.exception(
                        "[PUMP] Sink %s failed on %s",
                        type(sink).__name__,
                        type(message).__name__,
                    )
            self.dispatched += 1

            if self._stop_event.is_set():
                break
        logger.info("[PUMP] Stopped after %d message(s)", self.dispatched)

    def start(self) -> threading.Thread:
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, daemon=True, name="message-pump")
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def health_check(self) -> dict:
        return {
            "running": self.is_running,
            "dispatched": self.dispatched,
            "sink_errors": self.sink_errors,
            "first_message_at": self.first_message_at,
            "last_message_at": self.last_message_at,
        }
