"""Processing statistics for the ingest pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Stats:
    """Message counters for one pipeline run.

    ``received`` counts datagrams, ``unreadable`` those that were not valid
    JSON / raw messages, ``processed`` and ``failed`` the decode outcomes.
    """

    received: int = 0
    unreadable: int = 0
    processed: int = 0
    failed: int = 0
    last_message_at: float = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return (
            f"Stats: received={self.received} unreadable={self.unreadable} "
            f"processed={self.processed} failed={self.failed}"
        )

    def to_dict(self) -> dict:
        return {
            "received": self.received,
            "unreadable": self.unreadable,
            "processed": self.processed,
            "failed": self.failed,
            "last_message_at": self.last_message_at,
            "started_at": self.started_at.isoformat(),
            "success_rate": self._success_rate(),
        }

    def _success_rate(self) -> float:
        total = self.processed + self.failed
        if total == 0:
            return 1.0
        return self.processed / total
