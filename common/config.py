from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class ConfigError(ValueError):
    """Invalid startup configuration."""


def _default_env_file() -> str:
    # .env next to the working directory, the way the service is deployed.
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    station_elevation: Optional[float]

    udp_host: str
    udp_port: int

    metrics_host: str
    metrics_port: int

    mqtt_broker_host: Optional[str]
    mqtt_broker_port: int
    mqtt_username: Optional[str]
    mqtt_password: Optional[str]
    mqtt_topic_prefix: str

    rapid_wind_ttl_seconds: float
    status_ttl_seconds: float
    observation_ttl_factor: float

    log_level: str


def validate_station_elevation(value: Optional[float]) -> float:
    """Elevation in meters above sea level, used for barometric pressure.

    Negative or non-finite elevations are rejected here so that NaN never
    reaches the exported metrics.
    """
    if value is None:
        raise ConfigError("station elevation is required (TEMPEST_STATION_ELEVATION or --station-elevation)")
    elevation = float(value)
    if not math.isfinite(elevation):
        raise ConfigError(f"station elevation must be finite, got {value!r}")
    if elevation < 0:
        raise ConfigError(f"station elevation must not be negative, got {value!r}")
    return elevation


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("TEMPEST_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    station_elevation = _optional_float("TEMPEST_STATION_ELEVATION")

    udp_host = os.getenv("TEMPEST_UDP_HOST", "0.0.0.0")
    udp_port = int(os.getenv("TEMPEST_UDP_PORT", "50222"))

    metrics_host = os.getenv("TEMPEST_METRICS_HOST", "0.0.0.0")
    metrics_port = int(os.getenv("TEMPEST_METRICS_PORT", "8080"))

    # No broker host means the MQTT publisher stays disabled.
    mqtt_broker_host = os.getenv("MQTT_BROKER_HOST") or None
    mqtt_broker_port = int(os.getenv("MQTT_BROKER_PORT", "1883"))
    mqtt_username = os.getenv("MQTT_USERNAME") or None
    mqtt_password = os.getenv("MQTT_PASSWORD") or None
    mqtt_topic_prefix = os.getenv("MQTT_TOPIC_PREFIX", "tempest")

    # rapid_wind arrives every ~3s, device/hub status roughly every minute.
    rapid_wind_ttl_seconds = float(os.getenv("TEMPEST_RAPID_WIND_TTL_SECONDS", "15"))
    status_ttl_seconds = float(os.getenv("TEMPEST_STATUS_TTL_SECONDS", "180"))
    observation_ttl_factor = float(os.getenv("TEMPEST_OBSERVATION_TTL_FACTOR", "2.0"))

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    return Settings(
        station_elevation=station_elevation,
        udp_host=udp_host,
        udp_port=udp_port,
        metrics_host=metrics_host,
        metrics_port=metrics_port,
        mqtt_broker_host=mqtt_broker_host,
        mqtt_broker_port=mqtt_broker_port,
        mqtt_username=mqtt_username,
        mqtt_password=mqtt_password,
        mqtt_topic_prefix=mqtt_topic_prefix,
        rapid_wind_ttl_seconds=rapid_wind_ttl_seconds,
        status_ttl_seconds=status_ttl_seconds,
        observation_ttl_factor=observation_ttl_factor,
        log_level=log_level,
    )
