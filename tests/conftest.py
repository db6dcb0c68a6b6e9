"""Shared fixtures: sample Tempest UDP payloads and a controllable clock."""

from typing import Any, Dict, List, Optional

import pytest

from tempest_api.core.validation import RAW_MESSAGE_ADAPTER

# Sample obs_st row from the Tempest UDP API documentation.
OBS_ROW: List[Optional[float]] = [
    1588948614, 0.18, 0.22, 0.27, 144, 6, 1017.57, 22.37, 50.26,
    328, 0.03, 3, 0.000000, 0, 0, 0, 2.410, 1,
]


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def obs_payload(**overrides) -> Dict[str, Any]:
    """obs_st payload; ``slotN=value`` overrides one row slot."""
    row = list(OBS_ROW)
    extra = {}
    for key, value in overrides.items():
        if key.startswith("slot"):
            row[int(key[4:])] = value
        else:
            extra[key] = value
    payload = {
        "serial_number": "ST-00000512",
        "type": "obs_st",
        "hub_sn": "HB-00013030",
        "obs": [row],
        "firmware_revision": 129,
    }
    payload.update(extra)
    return payload


def raw(payload: Dict[str, Any]):
    return RAW_MESSAGE_ADAPTER.validate_python(payload)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rapid_wind_payload() -> Dict[str, Any]:
    return {
        "serial_number": "ST-00000512",
        "type": "rapid_wind",
        "hub_sn": "HB-00013030",
        "ob": [1588948614, 2.3, 128],
    }


@pytest.fixture
def precip_event_payload() -> Dict[str, Any]:
    return {
        "serial_number": "SK-00008453",
        "type": "evt_precip",
        "hub_sn": "HB-00000001",
        "evt": [1493322445],
    }


@pytest.fixture
def strike_event_payload() -> Dict[str, Any]:
    return {
        "serial_number": "AR-00004049",
        "type": "evt_strike",
        "hub_sn": "HB-00000001",
        "evt": [1493322445, 27, 3848],
    }


@pytest.fixture
def device_status_payload() -> Dict[str, Any]:
    return {
        "serial_number": "ST-00000512",
        "type": "device_status",
        "hub_sn": "HB-00013030",
        "timestamp": 1588948614,
        "uptime": 2189,
        "voltage": 3.50,
        "firmware_revision": 17,
        "rssi": -17,
        "hub_rssi": -87,
        "sensor_status": 0,
        "debug": 0,
    }


@pytest.fixture
def hub_status_payload() -> Dict[str, Any]:
    return {
        "serial_number": "HB-00000001",
        "type": "hub_status",
        "firmware_revision": "35",
        "uptime": 1670133,
        "rssi": -62,
        "timestamp": 1495724691,
        "reset_flags": "BOR,PIN,POR",
        "seq": 48,
        "fs": [1, 0, 15675411, 524288],
        "radio_stats": [2, 1, 0, 3, 2839],
        "mqtt_stats": [1, 0],
    }


ENV_VARS = [
    "TEMPEST_STATION_ELEVATION",
    "TEMPEST_UDP_HOST",
    "TEMPEST_UDP_PORT",
    "TEMPEST_METRICS_HOST",
    "TEMPEST_METRICS_PORT",
    "MQTT_BROKER_HOST",
    "MQTT_BROKER_PORT",
    "MQTT_USERNAME",
    "MQTT_PASSWORD",
    "MQTT_TOPIC_PREFIX",
    "TEMPEST_RAPID_WIND_TTL_SECONDS",
    "TEMPEST_STATUS_TTL_SECONDS",
    "TEMPEST_OBSERVATION_TTL_FACTOR",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No Tempest variables and no env file; restored on teardown."""
    for name in ENV_VARS:
        # setenv first so that values loaded from a .env are removed afterwards.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("TEMPEST_ENV_FILE", str(tmp_path / "missing.env"))
    return monkeypatch
