"""Raw → domain message adapter.

Turns validated raw UDP messages into decoded domain messages.

A failure only ever affects the one message being decoded: the caller gets
back the untouched raw message together with the error, logs both and
moves on to the next datagram.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Iterator, Optional

from ..domain.events import PrecipEvent, RapidWind, StrikeEvent, utc_from_unix
from ..domain.messages import TempestMessage
from ..domain.observation import (
    LightningObservation,
    Observation,
    PrecipKind,
    PrecipObservation,
    SolarObservation,
    WindObservation,
)
from ..domain.status import (
    DeviceStatus,
    HubStatus,
    ResetFlags,
    SensorStatus,
    UnrecognizedResetFlagError,
)
from ..domain.wind import Wind
from ..monitoring.stats import Stats
from ..validation.observation_slots import ObsSlot, named_slots
from ..validation.raw_messages import (
    RawDeviceStatus,
    RawHubStatus,
    RawMessage,
    RawObservation,
    RawPrecipEvent,
    RawRapidWind,
    RawStrikeEvent,
)

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """A raw message could not be turned into a domain message."""


class MissingFieldError(DecodeError):
    """A field required by the domain model is absent."""


class UnrecognizedCodeError(DecodeError):
    """An enumerated field holds a value outside the protocol."""


class InvalidFieldError(DecodeError):
    """A field holds a value that cannot be represented (e.g. a timestamp out of range)."""


@dataclass
class DecodeResult:
    """Outcome of decoding one raw message."""

    ok: bool
    raw: RawMessage
    message: Optional[TempestMessage] = None
    error: Optional[DecodeError] = None


def decode_precip_event(raw: RawPrecipEvent) -> PrecipEvent:
    return PrecipEvent(
        serial_number=raw.serial_number,
        hub_serial_number=raw.hub_sn,
        timestamp=utc_from_unix(raw.evt[0]),
    )


def decode_strike_event(raw: RawStrikeEvent) -> StrikeEvent:
    timestamp, distance, energy = raw.evt
    return StrikeEvent(
        serial_number=raw.serial_number,
        hub_serial_number=raw.hub_sn,
        timestamp=utc_from_unix(timestamp),
        distance=distance,
        energy=energy,
    )


def decode_rapid_wind(raw: RawRapidWind) -> RapidWind:
    timestamp, speed, direction = raw.ob
    return RapidWind(
        serial_number=raw.serial_number,
        hub_serial_number=raw.hub_sn,
        timestamp=utc_from_unix(timestamp),
        wind=Wind(speed, direction),
    )


def _precip_kind(code: Optional[float]) -> Optional[PrecipKind]:
    if code is None:
        return None
    if not math.isfinite(code) or code != int(code):
        raise UnrecognizedCodeError(f"Unrecognized precip type {code}")
    try:
        return PrecipKind(int(code))
    except ValueError:
        raise UnrecognizedCodeError(f"Unrecognized precip type {int(code)}") from None


def decode_observation(raw: RawObservation) -> Observation:
    """Decode an ``obs_st`` report.

    Raises:
        MissingFieldError: timestamp, battery or report interval missing.
        UnrecognizedCodeError: precipitation type outside 0..3.
        OverflowError: timestamp or interval out of range; reported by
            decode_message as InvalidFieldError.
    """
    if not raw.obs:
        raise MissingFieldError("Missing observation row")
    slots = named_slots(raw.obs[0])

    timestamp = slots[ObsSlot.TIMESTAMP]
    if timestamp is None:
        raise MissingFieldError("Missing observation timestamp")
    battery_volts = slots[ObsSlot.BATTERY]
    if battery_volts is None:
        raise MissingFieldError("Missing battery voltage")
    report_interval = slots[ObsSlot.REPORT_INTERVAL]
    if report_interval is None:
        raise MissingFieldError("Missing report interval")

    precip_kind = _precip_kind(slots[ObsSlot.PRECIPITATION_TYPE])

    return Observation(
        serial_number=raw.serial_number,
        hub_serial_number=raw.hub_sn,
        timestamp=utc_from_unix(timestamp),
        battery_volts=battery_volts,
        report_interval=timedelta(minutes=int(report_interval)),
        wind=WindObservation.from_fields(
            lull=slots[ObsSlot.WIND_LULL],
            avg=slots[ObsSlot.WIND_AVG],
            gust=slots[ObsSlot.WIND_GUST],
            direction=slots[ObsSlot.WIND_DIRECTION],
            interval_seconds=slots[ObsSlot.WIND_SAMPLE_INTERVAL],
        ),
        solar=SolarObservation.from_fields(
            illuminance=slots[ObsSlot.ILLUMINANCE],
            ultraviolet_index=slots[ObsSlot.UV_INDEX],
            irradiance=slots[ObsSlot.SOLAR_RADIATION],
        ),
        precip=PrecipObservation.from_fields(
            quantity_last_minute=slots[ObsSlot.RAIN_LAST_MINUTE],
            kind=precip_kind,
        ),
        lightning=LightningObservation.from_fields(
            average_distance=slots[ObsSlot.LIGHTNING_AVG_DISTANCE],
            count=slots[ObsSlot.LIGHTNING_COUNT],
        ),
        station_pressure=slots[ObsSlot.STATION_PRESSURE],
        air_temperature=slots[ObsSlot.AIR_TEMPERATURE],
        relative_humidity=slots[ObsSlot.RELATIVE_HUMIDITY],
        firmware_revision=raw.firmware_revision,
    )


def decode_device_status(raw: RawDeviceStatus) -> DeviceStatus:
    return DeviceStatus(
        serial_number=raw.serial_number,
        hub_serial_number=raw.hub_sn,
        timestamp=utc_from_unix(raw.timestamp),
        uptime=timedelta(seconds=raw.uptime),
        voltage=raw.voltage,
        firmware_revision=raw.firmware_revision,
        rssi=raw.rssi,
        hub_rssi=raw.hub_rssi,
        sensor_status=SensorStatus.from_bits(raw.sensor_status),
        debug=raw.debug == 1,
    )


def decode_hub_status(raw: RawHubStatus) -> HubStatus:
    try:
        reset_flags = ResetFlags.from_str(raw.reset_flags)
    except UnrecognizedResetFlagError as e:
        raise UnrecognizedCodeError(str(e)) from e
    return HubStatus(
        serial_number=raw.serial_number,
        hub_serial_number=raw.hub_sn,
        firmware_revision=raw.firmware_revision,
        uptime=timedelta(seconds=raw.uptime),
        rssi=raw.rssi,
        timestamp=utc_from_unix(raw.timestamp),
        reset_flags=reset_flags,
        seq=raw.seq,
        radio_stats=tuple(raw.radio_stats),
    )


def decode_message(raw: RawMessage) -> DecodeResult:
    """Decode one raw message.

    Args:
        raw: One of the six raw message variants.

    Returns:
        DecodeResult with the domain message, or the original raw message
        and the error.
    """
    try:
        if isinstance(raw, RawPrecipEvent):
            message = decode_precip_event(raw)
        elif isinstance(raw, RawStrikeEvent):
            message = decode_strike_event(raw)
        elif isinstance(raw, RawRapidWind):
            message = decode_rapid_wind(raw)
        elif isinstance(raw, RawObservation):
            message = decode_observation(raw)
        elif isinstance(raw, RawDeviceStatus):
            message = decode_device_status(raw)
        elif isinstance(raw, RawHubStatus):
            message = decode_hub_status(raw)
        else:
            raise TypeError(f"Unsupported raw message type: {type(raw).__name__}")
    except DecodeError as e:
        return DecodeResult(ok=False, raw=raw, error=e)
    except (OverflowError, ValueError, OSError) as e:
        # datetime/timedelta conversions of out-of-range numbers.
        error = InvalidFieldError(f"Invalid field value: {e}")
        error.__cause__ = e
        return DecodeResult(ok=False, raw=raw, error=error)

    return DecodeResult(ok=True, raw=raw, message=message)


def decode_stream(
    raw_messages: Iterable[RawMessage],
    stats: Optional[Stats] = None,
) -> Iterator[TempestMessage]:
    """Lazily decode a (possibly unbounded) stream of raw messages.

    Undecodable messages are logged and skipped; the stream only ends when
    ``raw_messages`` does.
    """
    for raw in raw_messages:
        result = decode_message(raw)
        if not result.ok:
            logger.warning("[DECODER] Dropped undecodable message: %r", result.raw)
            logger.warning("[DECODER] .. error was: %s", result.error)
            if stats is not None:
                stats.failed += 1
            continue
        if stats is not None:
            stats.processed += 1
        yield result.message
