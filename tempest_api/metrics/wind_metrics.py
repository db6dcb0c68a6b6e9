"""Gauge group for one wind vector."""

from __future__ import annotations

from typing import Callable

from prometheus_client import Gauge

from ..core.domain.wind import Wind
from .perishable import Duration, Perishable


class WindMetrics:
    """Speed, direction and north/east velocity gauges for one wind sample.

    ``cell`` wraps each gauge in a :class:`Perishable` owned by the
    exporter's collector, so the four series expire together.
    """

    def __init__(self, name: str, descr: str, cell: Callable[[Gauge], Perishable[Gauge]]):
        self.speed_magnitude = cell(station_gauge(
            f"{name}_speed_magnitude_m_per_s",
            f"{descr} speed magnitude (m·s^-1)",
        ))
        self.source_direction = cell(station_gauge(
            f"{name}_source_direction_deg",
            f"{descr} source direction (deg)",
        ))
        self.component_velocity_north = cell(station_gauge(
            f"{name}_component_velocity_north_m_per_s",
            f"{descr} component velocity North (m·s^-1)",
        ))
        self.component_velocity_east = cell(station_gauge(
            f"{name}_component_velocity_east_m_per_s",
            f"{descr} component velocity East (m·s^-1)",
        ))

    def export(self, wind: Wind, ttl: Duration) -> None:
        self.speed_magnitude.freshen(ttl).set(wind.speed_magnitude)
        self.source_direction.freshen(ttl).set(wind.source_direction)
        north, east = wind.component_velocity()
        self.component_velocity_north.freshen(ttl).set(north)
        self.component_velocity_east.freshen(ttl).set(east)


def station_gauge(name: str, documentation: str, labelnames=()) -> Gauge:
    # Unregistered: exposed only through PerishableCollector while fresh.
    return Gauge(
        name,
        documentation,
        labelnames,
        namespace="tempest",
        subsystem="station",
        registry=None,
    )
