"""Domain model for the station's periodic observation report.

An ``Observation`` always carries its timestamp, battery voltage and report
interval. Every other reading is optional: scalars may be ``None`` and each
group (wind, solar, precipitation, lightning) is either complete or absent.
Groups are only built through their ``from_fields`` constructors, which
return ``None`` unless every contributing field is present.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Optional

from . import thermodynamics
from .wind import Wind


class PrecipKind(IntEnum):
    """Precipitation type code reported in the observation."""

    NONE = 0
    RAIN = 1
    HAIL = 2
    RAIN_HAIL = 3


def _all_present(*values) -> bool:
    return all(value is not None for value in values)


@dataclass(frozen=True)
class WindObservation:
    lull: Wind
    avg: Wind
    gust: Wind
    interval: timedelta

    @classmethod
    def from_fields(
        cls,
        lull: Optional[float],
        avg: Optional[float],
        gust: Optional[float],
        direction: Optional[float],
        interval_seconds: Optional[float],
    ) -> Optional["WindObservation"]:
        if not _all_present(lull, avg, gust, direction, interval_seconds):
            return None
        return cls(
            lull=Wind(lull, direction),
            avg=Wind(avg, direction),
            gust=Wind(gust, direction),
            interval=timedelta(seconds=int(interval_seconds)),
        )


@dataclass(frozen=True)
class SolarObservation:
    illuminance: float  # lux
    ultraviolet_index: float
    irradiance: float  # W/m^2

    @classmethod
    def from_fields(
        cls,
        illuminance: Optional[float],
        ultraviolet_index: Optional[float],
        irradiance: Optional[float],
    ) -> Optional["SolarObservation"]:
        if not _all_present(illuminance, ultraviolet_index, irradiance):
            return None
        return cls(
            illuminance=illuminance,
            ultraviolet_index=ultraviolet_index,
            irradiance=irradiance,
        )


@dataclass(frozen=True)
class PrecipObservation:
    quantity_last_minute: float  # mm
    kind: PrecipKind

    @classmethod
    def from_fields(
        cls,
        quantity_last_minute: Optional[float],
        kind: Optional[PrecipKind],
    ) -> Optional["PrecipObservation"]:
        if not _all_present(quantity_last_minute, kind):
            return None
        return cls(quantity_last_minute=quantity_last_minute, kind=kind)


@dataclass(frozen=True)
class LightningObservation:
    average_distance: float  # km
    count: int

    @classmethod
    def from_fields(
        cls,
        average_distance: Optional[float],
        count: Optional[float],
    ) -> Optional["LightningObservation"]:
        if not _all_present(average_distance, count):
            return None
        return cls(average_distance=average_distance, count=int(count))


@dataclass(frozen=True)
class Observation:
    """Decoded ``obs_st`` report.

    Derived quantities are computed on demand and never cached; each
    returns ``None`` as soon as one of its inputs is missing.
    """

    serial_number: str
    hub_serial_number: Optional[str]
    timestamp: datetime
    battery_volts: float
    report_interval: timedelta

    wind: Optional[WindObservation] = None
    solar: Optional[SolarObservation] = None
    precip: Optional[PrecipObservation] = None
    lightning: Optional[LightningObservation] = None

    station_pressure: Optional[float] = None  # hPa
    air_temperature: Optional[float] = None  # °C
    relative_humidity: Optional[float] = None  # %

    firmware_revision: Optional[int] = None

    def barometric_pressure(self, station_elevation: float) -> Optional[float]:
        """Sea-level pressure (hPa) for a station at ``station_elevation`` m."""
        if self.station_pressure is None or self.air_temperature is None:
            return None
        return thermodynamics.barometric_pressure(
            self.station_pressure,
            self.air_temperature,
            station_elevation,
        )

    def vapor_pressure_saturated(self) -> Optional[float]:
        if self.air_temperature is None:
            return None
        return thermodynamics.vapor_pressure_saturated(self.air_temperature)

    def vapor_pressure_actual(self) -> Optional[float]:
        if self.air_temperature is None or self.relative_humidity is None:
            return None
        return thermodynamics.vapor_pressure_actual(
            self.air_temperature,
            self.relative_humidity,
        )

    def dew_point(self) -> Optional[float]:
        actual = self.vapor_pressure_actual()
        if actual is None:
            return None
        return thermodynamics.dew_point(actual)

    def wet_bulb_temperature(self) -> Optional[float]:
        if self.air_temperature is None or self.relative_humidity is None:
            return None
        return thermodynamics.wet_bulb_temperature(
            self.air_temperature,
            self.relative_humidity,
        )

    def apparent_temperature(self) -> Optional[float]:
        actual = self.vapor_pressure_actual()
        if actual is None or self.wind is None or self.solar is None:
            return None
        return thermodynamics.apparent_temperature(
            self.air_temperature,
            actual,
            self.wind.avg.speed_magnitude,
            self.solar.irradiance,
        )
