"""Prometheus metrics: perishable gauges and the station exporter."""

from .exporter import Exporter, PerishableCollector, StatsCollector
from .perishable import Perishable
from .wind_metrics import WindMetrics

__all__ = [
    "Exporter",
    "PerishableCollector",
    "StatsCollector",
    "Perishable",
    "WindMetrics",
]
