"""Domain layer - decoded station messages."""

from .events import PrecipEvent, RapidWind, StrikeEvent, utc_from_unix
from .messages import MESSAGE_KINDS, TempestMessage, message_kind
from .observation import (
    LightningObservation,
    Observation,
    PrecipKind,
    PrecipObservation,
    SolarObservation,
    WindObservation,
)
from .status import (
    DeviceStatus,
    HubStatus,
    ResetFlags,
    SensorStatus,
    UnrecognizedResetFlagError,
)
from .wind import Wind

__all__ = [
    "PrecipEvent",
    "StrikeEvent",
    "RapidWind",
    "utc_from_unix",
    "TempestMessage",
    "MESSAGE_KINDS",
    "message_kind",
    "Observation",
    "WindObservation",
    "SolarObservation",
    "PrecipObservation",
    "LightningObservation",
    "PrecipKind",
    "DeviceStatus",
    "HubStatus",
    "SensorStatus",
    "ResetFlags",
    "UnrecognizedResetFlagError",
    "Wind",
]
