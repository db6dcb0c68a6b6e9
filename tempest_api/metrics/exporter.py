"""Prometheus exporter for decoded Tempest messages.

Station values are plain ``Gauge`` objects that are never registered
directly. Each one is wrapped in a :class:`Perishable` and exposed by
:class:`PerishableCollector`, which only yields gauges that are still
fresh. A reading that is not refreshed within its validity window simply
disappears from ``/metrics`` instead of being reported forever.

Validity windows:
  - rapid wind: ``rapid_wind_ttl``
  - observation values: ``observation_ttl_factor`` x report interval
  - device / hub status: ``status_ttl``
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Callable, List, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest
from prometheus_client.core import CounterMetricFamily
from prometheus_client.registry import Collector

from ..core.domain import (
    DeviceStatus,
    HubStatus,
    Observation,
    PrecipEvent,
    RapidWind,
    StrikeEvent,
    TempestMessage,
    message_kind,
)
from ..core.monitoring import Stats
from .perishable import Duration, Perishable
from .wind_metrics import WindMetrics, station_gauge

logger = logging.getLogger(__name__)

DEFAULT_RAPID_WIND_TTL = timedelta(seconds=15)
DEFAULT_STATUS_TTL = timedelta(minutes=3)
DEFAULT_OBSERVATION_TTL_FACTOR = 2.0
MIN_REPORT_INTERVAL = timedelta(minutes=1)


class PerishableCollector(Collector):
    """Yields the samples of every gauge whose cell is still fresh."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._cells: List[Perishable[Gauge]] = []

    def cell(self, gauge: Gauge) -> Perishable[Gauge]:
        cell = Perishable(gauge, clock=self._clock)
        self._cells.append(cell)
        return cell

    def collect(self):
        for cell in self._cells:
            families = cell.map(lambda gauge: list(gauge.collect()))
            if families:
                yield from families

    def describe(self):
        # Metric set changes with freshness; skip the registry's duplicate check.
        return []


class StatsCollector(Collector):
    """Pipeline drop counters read straight from :class:`Stats`."""

    def __init__(self, stats: Stats):
        self._stats = stats

    def collect(self):
        yield CounterMetricFamily(
            "tempest_exporter_unreadable_messages",
            "Datagrams that were not a valid Tempest message",
            value=self._stats.unreadable,
        )
        yield CounterMetricFamily(
            "tempest_exporter_decode_failures",
            "Messages dropped because they could not be decoded",
            value=self._stats.failed,
        )

    def describe(self):
        return []


class Exporter:
    """Turns decoded messages into Prometheus metrics.

    ``handle_report`` is called from the pump thread; ``encode`` from the
    HTTP scrape thread.

    Usage:
        exporter = Exporter(station_elevation=120.0)
        exporter.handle_report(observation)
        body = exporter.encode()
    """

    def __init__(
        self,
        station_elevation: float,
        rapid_wind_ttl: Duration = DEFAULT_RAPID_WIND_TTL,
        status_ttl: Duration = DEFAULT_STATUS_TTL,
        observation_ttl_factor: float = DEFAULT_OBSERVATION_TTL_FACTOR,
        stats: Optional[Stats] = None,
        registry: Optional[CollectorRegistry] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.station_elevation = station_elevation
        self.rapid_wind_ttl = rapid_wind_ttl
        self.status_ttl = status_ttl
        self.observation_ttl_factor = observation_ttl_factor
        self.registry = registry if registry is not None else CollectorRegistry()

        self.messages_received = Counter(
            "tempest_exporter_messages_received",
            "Decoded messages handled by the exporter",
            ["type"],
            registry=self.registry,
        )

        self._collector = PerishableCollector(clock)
        self.registry.register(self._collector)
        if stats is not None:
            self.registry.register(StatsCollector(stats))

        cell = self._collector.cell

        self.instant_wind = WindMetrics("instant_wind", "Instantaneous wind", cell)

        self.observation_timestamp = cell(station_gauge(
            "observation_timestamp_unix_sec",
            "Current observation Unix timestamp (s)",
        ))
        self.wind_lull = WindMetrics("observation_wind_lull", "3-minute wind lull", cell)
        self.wind_avg = WindMetrics("observation_wind_avg", "3-minute wind average", cell)
        self.wind_gust = WindMetrics("observation_wind_gust", "3-minute wind gust", cell)
        self.wind_sample_interval = cell(station_gauge(
            "observation_wind_sample_interval_sec",
            "Wind sample interval (s)",
        ))
        self.station_pressure = cell(station_gauge(
            "observation_station_pressure_hpa",
            "Station pressure (hPa)",
        ))
        self.barometric_pressure = cell(station_gauge(
            "observation_barometric_pressure_hpa",
            "Barometric pressure reduced to sea level (hPa)",
        ))
        self.air_temperature = cell(station_gauge(
            "observation_temperature_deg_c",
            "Air temperature (°C)",
        ))
        self.relative_humidity = cell(station_gauge(
            "observation_relative_humidity_pct",
            "Relative humidity (%)",
        ))
        self.vapor_pressure = cell(station_gauge(
            "observation_vapor_pressure_hpa",
            "Actual vapor pressure (hPa)",
        ))
        self.dew_point = cell(station_gauge(
            "observation_dew_point_deg_c",
            "Dew point (°C)",
        ))
        self.wet_bulb_temperature = cell(station_gauge(
            "observation_wet_bulb_temperature_deg_c",
            "Wet-bulb temperature (°C)",
        ))
        self.apparent_temperature = cell(station_gauge(
            "observation_apparent_temperature_deg_c",
            "Apparent temperature (°C)",
        ))
        self.illuminance = cell(station_gauge(
            "observation_illuminance_lux",
            "Illuminance (lux)",
        ))
        self.ultraviolet_index = cell(station_gauge(
            "observation_uv_index",
            "UV index",
        ))
        self.irradiance = cell(station_gauge(
            "observation_irradiance_w_per_m2",
            "Solar irradiance (W·m^-2)",
        ))
        self.rain_last_minute = cell(station_gauge(
            "observation_previous_minute_rain_mm",
            "Rain accumulated over the previous minute (mm)",
        ))
        self.precipitation_type = cell(station_gauge(
            "observation_precipitation_type",
            "Precipitation type (0 none, 1 rain, 2 hail, 3 rain and hail)",
        ))
        self.lightning_average_distance = cell(station_gauge(
            "observation_lightning_average_distance_km",
            "Lightning strike average distance (km)",
        ))
        self.lightning_count = cell(station_gauge(
            "observation_lightning_count",
            "Lightning strikes over the report interval",
        ))
        self.battery = cell(station_gauge(
            "observation_battery_volts",
            "Battery voltage (V)",
        ))

        self.device_voltage = cell(station_gauge(
            "device_voltage_volts",
            "Device voltage (V)",
        ))
        self.device_rssi = cell(station_gauge(
            "device_rssi_dbm",
            "Device signal strength (dBm)",
        ))
        self.device_hub_rssi = cell(station_gauge(
            "device_hub_rssi_dbm",
            "Hub signal strength as seen by the device (dBm)",
        ))
        self.device_uptime = cell(station_gauge(
            "device_uptime_seconds",
            "Device uptime (s)",
        ))
        self.device_sensor_failure = cell(station_gauge(
            "device_sensor_status",
            "Device sensor status flag (1 set, 0 clear)",
            ["sensor"],
        ))

        self.hub_rssi = cell(station_gauge(
            "hub_rssi_dbm",
            "Hub signal strength (dBm)",
        ))
        self.hub_uptime = cell(station_gauge(
            "hub_uptime_seconds",
            "Hub uptime (s)",
        ))

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def handle_report(self, message: TempestMessage) -> None:
        self.messages_received.labels(type=message_kind(message)).inc()

        if isinstance(message, RapidWind):
            self.instant_wind.export(message.wind, self.rapid_wind_ttl)
        elif isinstance(message, Observation):
            self._export_observation(message)
        elif isinstance(message, DeviceStatus):
            self._export_device_status(message)
        elif isinstance(message, HubStatus):
            self._export_hub_status(message)
        elif isinstance(message, (PrecipEvent, StrikeEvent)):
            # Counted only.
            pass
        else:
            raise TypeError(f"Unsupported message type: {type(message).__name__}")

    def observation_ttl(self, observation: Observation) -> timedelta:
        interval = max(observation.report_interval, MIN_REPORT_INTERVAL)
        return interval * self.observation_ttl_factor

    def _export_observation(self, obs: Observation) -> None:
        ttl = self.observation_ttl(obs)

        self.observation_timestamp.freshen(ttl).set(obs.timestamp.timestamp())
        self.battery.freshen(ttl).set(obs.battery_volts)

        if obs.wind is not None:
            self.wind_lull.export(obs.wind.lull, ttl)
            self.wind_avg.export(obs.wind.avg, ttl)
            self.wind_gust.export(obs.wind.gust, ttl)
            self.wind_sample_interval.freshen(ttl).set(obs.wind.interval.total_seconds())

        if obs.solar is not None:
            self.illuminance.freshen(ttl).set(obs.solar.illuminance)
            self.ultraviolet_index.freshen(ttl).set(obs.solar.ultraviolet_index)
            self.irradiance.freshen(ttl).set(obs.solar.irradiance)

        if obs.precip is not None:
            self.rain_last_minute.freshen(ttl).set(obs.precip.quantity_last_minute)
            self.precipitation_type.freshen(ttl).set(int(obs.precip.kind))

        if obs.lightning is not None:
            self.lightning_average_distance.freshen(ttl).set(obs.lightning.average_distance)
            self.lightning_count.freshen(ttl).set(obs.lightning.count)

        _set_if_available(self.station_pressure, obs.station_pressure, ttl)
        _set_if_available(self.air_temperature, obs.air_temperature, ttl)
        _set_if_available(self.relative_humidity, obs.relative_humidity, ttl)
        _set_if_available(
            self.barometric_pressure,
            obs.barometric_pressure(self.station_elevation),
            ttl,
        )
        _set_if_available(self.vapor_pressure, obs.vapor_pressure_actual(), ttl)
        _set_if_available(self.dew_point, obs.dew_point(), ttl)
        _set_if_available(self.wet_bulb_temperature, obs.wet_bulb_temperature(), ttl)
        _set_if_available(self.apparent_temperature, obs.apparent_temperature(), ttl)

    def _export_device_status(self, status: DeviceStatus) -> None:
        ttl = self.status_ttl
        self.device_voltage.freshen(ttl).set(status.voltage)
        self.device_rssi.freshen(ttl).set(status.rssi)
        self.device_hub_rssi.freshen(ttl).set(status.hub_rssi)
        self.device_uptime.freshen(ttl).set(status.uptime.total_seconds())
        gauge = self.device_sensor_failure.freshen(ttl)
        for sensor, flag in status.sensor_status.items():
            gauge.labels(sensor=sensor).set(1 if flag else 0)

    def _export_hub_status(self, status: HubStatus) -> None:
        ttl = self.status_ttl
        self.hub_rssi.freshen(ttl).set(status.rssi)
        self.hub_uptime.freshen(ttl).set(status.uptime.total_seconds())

    # ------------------------------------------------------------------
    # Exposition
    # ------------------------------------------------------------------

    def encode(self) -> bytes:
        """Text exposition of every fresh metric."""
        return generate_latest(self.registry)

    def dump(self) -> None:
        logger.info("[EXPORTER] Current metrics:\n%s", self.encode().decode("utf-8"))


def _set_if_available(cell: Perishable[Gauge], value: Optional[float], ttl: Duration) -> None:
    if value is None:
        return
    cell.freshen(ttl).set(value)
