"""Event-style messages: rain start, lightning strike, rapid wind."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .wind import Wind


def utc_from_unix(seconds: float) -> datetime:
    """Convert a Unix timestamp (whole seconds) to an aware UTC datetime."""
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc)


@dataclass(frozen=True)
class PrecipEvent:
    """Rain start detected by the station."""

    serial_number: str
    hub_serial_number: Optional[str]
    timestamp: datetime


@dataclass(frozen=True)
class StrikeEvent:
    """Single lightning strike."""

    serial_number: str
    hub_serial_number: Optional[str]
    timestamp: datetime
    distance: float  # km
    energy: float


@dataclass(frozen=True)
class RapidWind:
    """Instantaneous wind sample (broadcast every few seconds)."""

    serial_number: str
    hub_serial_number: Optional[str]
    timestamp: datetime
    wind: Wind
