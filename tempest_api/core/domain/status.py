"""Device and hub status messages, with their flag decoders."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timedelta
from typing import Optional, Tuple


class UnrecognizedResetFlagError(ValueError):
    """Raised when a hub reset-flag label is not part of the protocol."""

    def __init__(self, label: str):
        super().__init__(f"Unrecognized reset flag label {label!r}")
        self.label = label


# Bit masks of the device ``sensor_status`` field.
SENSOR_STATUS_BITS = {
    "lightning_failure": 0x1,
    "lightning_noise": 0x2,
    "lightning_disturber": 0x4,
    "pressure_failed": 0x8,
    "temperature_failed": 0x10,
    "humidity_failed": 0x20,
    "wind_failed": 0x40,
    "precip_failed": 0x80,
    "irradiance_failed": 0x100,
    "power_booster_depleted": 0x8000,
    "power_booster_shore_power": 0x10000,
}

# Hub reset-flag label -> ResetFlags attribute.
RESET_FLAG_LABELS = {
    "BOR": "brownout",
    "PIN": "pin",
    "POR": "power_on",
    "SFT": "software",
    "WDG": "watchdog",
    "WWD": "window_watchdog",
    "LPW": "low_power",
    "HRDFLT": "hard_fault",
}


@dataclass(frozen=True)
class SensorStatus:
    lightning_failure: bool = False
    lightning_noise: bool = False
    lightning_disturber: bool = False
    pressure_failed: bool = False
    temperature_failed: bool = False
    humidity_failed: bool = False
    wind_failed: bool = False
    precip_failed: bool = False
    irradiance_failed: bool = False
    power_booster_depleted: bool = False
    power_booster_shore_power: bool = False

    @classmethod
    def from_bits(cls, field: int) -> "SensorStatus":
        """Decode the bitfield. Undefined bits are ignored."""
        return cls(**{name: bool(field & mask) for name, mask in SENSOR_STATUS_BITS.items()})

    def items(self):
        """(flag name, value) pairs in bit order."""
        return [(f.name, getattr(self, f.name)) for f in fields(self)]


@dataclass(frozen=True)
class ResetFlags:
    brownout: bool = False
    pin: bool = False
    power_on: bool = False
    software: bool = False
    watchdog: bool = False
    window_watchdog: bool = False
    low_power: bool = False
    hard_fault: bool = False

    @classmethod
    def from_str(cls, value: str) -> "ResetFlags":
        """Parse a comma-separated label set such as ``"BOR,PIN,POR"``.

        Empty tokens are skipped; any other unknown token raises
        :class:`UnrecognizedResetFlagError`.
        """
        flags = {}
        for token in value.split(","):
            label = token.strip()
            if not label:
                continue
            attr = RESET_FLAG_LABELS.get(label)
            if attr is None:
                raise UnrecognizedResetFlagError(label)
            flags[attr] = True
        return cls(**flags)


@dataclass(frozen=True)
class DeviceStatus:
    serial_number: str
    hub_serial_number: Optional[str]
    timestamp: datetime
    uptime: timedelta
    voltage: float
    firmware_revision: int
    rssi: float
    hub_rssi: float
    sensor_status: SensorStatus
    debug: bool


@dataclass(frozen=True)
class HubStatus:
    serial_number: str
    hub_serial_number: Optional[str]
    firmware_revision: str
    uptime: timedelta
    rssi: float
    timestamp: datetime
    reset_flags: ResetFlags
    seq: int
    radio_stats: Tuple[int, ...] = ()
