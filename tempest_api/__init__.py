"""WeatherFlow Tempest local UDP API exporter."""

__version__ = "0.1.0"
