"""Validation layer - raw message schemas."""

from .observation_slots import ObsSlot, named_slots
from .raw_messages import (
    RAW_MESSAGE_ADAPTER,
    RawDeviceStatus,
    RawHubStatus,
    RawMessage,
    RawObservation,
    RawPrecipEvent,
    RawRapidWind,
    RawStrikeEvent,
)

__all__ = [
    "ObsSlot",
    "named_slots",
    "RAW_MESSAGE_ADAPTER",
    "RawMessage",
    "RawPrecipEvent",
    "RawStrikeEvent",
    "RawRapidWind",
    "RawObservation",
    "RawDeviceStatus",
    "RawHubStatus",
]
