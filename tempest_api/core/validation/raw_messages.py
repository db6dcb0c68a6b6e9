"""Validation schemas for the Tempest local UDP API.

Every datagram is a JSON object whose ``type`` field selects one of six
message shapes. These models are the decode input boundary: they only
check JSON types; domain rules (required observation slots, enumerated
codes, reset-flag labels) belong to the decoder.

Example ``obs_st``::

    {
        "serial_number": "ST-00000512",
        "type": "obs_st",
        "hub_sn": "HB-00013030",
        "obs": [[1588948614, 0.18, 0.22, 0.27, 144, 6, 1017.57, 22.37,
                 50.26, 328, 0.03, 3, 0.000000, 0, 0, 0, 2.410, 1]],
        "firmware_revision": 129
    }
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class _RawBase(BaseModel):
    # Raw messages are never modified after parsing; a failed decode hands
    # back the same object for logging.
    model_config = ConfigDict(frozen=True, extra="ignore")

    serial_number: str
    hub_sn: Optional[str] = None


class RawPrecipEvent(_RawBase):
    type: Literal["evt_precip"] = "evt_precip"
    evt: Tuple[int]


class RawStrikeEvent(_RawBase):
    type: Literal["evt_strike"] = "evt_strike"
    evt: Tuple[int, float, float]


class RawRapidWind(_RawBase):
    type: Literal["rapid_wind"] = "rapid_wind"
    ob: Tuple[int, float, float]


class RawObservation(_RawBase):
    type: Literal["obs_st"] = "obs_st"
    obs: List[List[Optional[float]]]
    firmware_revision: Optional[int] = None


class RawDeviceStatus(_RawBase):
    type: Literal["device_status"] = "device_status"
    timestamp: int
    uptime: int
    voltage: float
    firmware_revision: int
    rssi: float
    hub_rssi: float
    sensor_status: int
    debug: int = 0


class RawHubStatus(_RawBase):
    type: Literal["hub_status"] = "hub_status"
    firmware_revision: str
    uptime: int
    rssi: float
    timestamp: int
    reset_flags: str
    seq: int
    radio_stats: List[int] = Field(default_factory=list)

    @field_validator("firmware_revision", mode="before")
    @classmethod
    def coerce_firmware_revision(cls, v):
        # Older hub firmware sends the revision as a number.
        if isinstance(v, (int, float)):
            return str(v)
        return v


RawMessage = Annotated[
    Union[
        RawPrecipEvent,
        RawStrikeEvent,
        RawRapidWind,
        RawObservation,
        RawDeviceStatus,
        RawHubStatus,
    ],
    Field(discriminator="type"),
]

RAW_MESSAGE_ADAPTER: TypeAdapter[RawMessage] = TypeAdapter(RawMessage)
