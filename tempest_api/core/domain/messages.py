"""Closed set of decoded message kinds."""

from __future__ import annotations

from typing import Union

from .events import PrecipEvent, RapidWind, StrikeEvent
from .observation import Observation
from .status import DeviceStatus, HubStatus

TempestMessage = Union[
    PrecipEvent,
    StrikeEvent,
    RapidWind,
    Observation,
    DeviceStatus,
    HubStatus,
]

# Label used by metrics and logs for each message kind.
MESSAGE_KINDS = {
    PrecipEvent: "precip_event",
    StrikeEvent: "strike_event",
    RapidWind: "rapid_wind",
    Observation: "observation",
    DeviceStatus: "device_status",
    HubStatus: "hub_status",
}


def message_kind(message: TempestMessage) -> str:
    """Label of a decoded message; rejects anything outside the union."""
    try:
        return MESSAGE_KINDS[type(message)]
    except KeyError:
        raise TypeError(f"Unsupported message type: {type(message).__name__}") from None
