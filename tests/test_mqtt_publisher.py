"""Tests for the MQTT republisher (paho client mocked).

Run:
    pytest tests/test_mqtt_publisher.py -v
"""

import time
from unittest.mock import MagicMock

import pytest

from conftest import obs_payload, raw
from tempest_api.core.adapters import decode_message
from tempest_api.core.domain import Wind
from tempest_api.mqtt import MQTTPublisher, observation_messages, wind_messages


def decoded(payload):
    return decode_message(raw(payload)).message


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def mock_client():
    """Mocked paho client; every publish succeeds."""
    client = MagicMock()
    client.publish = MagicMock(return_value=MagicMock(rc=0))
    return client


@pytest.fixture
def publisher(mock_client):
    pub = MQTTPublisher(
        broker_host="broker.local",
        station_elevation=0.0,
        username="user",
        password="secret",
        client=mock_client,
    )
    yield pub
    pub.shutdown()


# =============================================================================
# TOPICS
# =============================================================================

class TestTopics:

    def test_wind_topics(self):
        messages = dict(wind_messages("tempest/instant_wind", Wind(5.0, 90.0)))
        assert messages["tempest/instant_wind/speed_magnitude_m_per_s"] == "5.0"
        assert messages["tempest/instant_wind/source_direction_deg"] == "90.0"
        north, east = messages["tempest/instant_wind/component_velocity_m_per_s"].split()
        assert float(north) == pytest.approx(0.0, abs=1e-9)
        assert float(east) == pytest.approx(5.0)

    def test_observation_topics(self):
        messages = dict(observation_messages("tempest", decoded(obs_payload()), 0.0))
        assert messages["tempest/observation/timestamp"] == "2020-05-08T14:36:54+00:00"
        assert messages["tempest/observation/thermal/temperature_deg_c"] == "22.37"
        assert messages["tempest/observation/pressure/barometric_hpa"] == "1017.57"
        assert messages["tempest/observation/solar/uv_index"] == "0.03"
        assert messages["tempest/observation/precip/previous_minute_rain_mm"] == "0.0"
        assert "tempest/observation/wind/gust/speed_magnitude_m_per_s" in messages

    def test_absent_values_are_not_published(self):
        obs = decoded(obs_payload(slot4=None, slot8=None, slot9=None))
        topics = [topic for topic, _ in observation_messages("tempest", obs, 0.0)]
        assert "tempest/observation/thermal/relative_humidity_pct" not in topics
        assert "tempest/observation/thermal/dew_point_deg_c" not in topics
        assert not any(topic.startswith("tempest/observation/wind/") for topic in topics)
        assert not any(topic.startswith("tempest/observation/solar/") for topic in topics)
        assert "tempest/observation/thermal/temperature_deg_c" in topics


# =============================================================================
# PUBLISHER
# =============================================================================

class TestPublisher:

    def test_client_setup(self, publisher, mock_client):
        mock_client.username_pw_set.assert_called_once_with("user", "secret")
        publisher.start()
        mock_client.connect_async.assert_called_once_with("broker.local", 1883, keepalive=15)
        mock_client.loop_start.assert_called_once()

    def test_no_credentials(self, mock_client):
        MQTTPublisher("broker.local", station_elevation=0.0, client=mock_client)
        mock_client.username_pw_set.assert_not_called()

    def test_rapid_wind_is_published_retained(self, publisher, mock_client, rapid_wind_payload):
        publisher.start()
        publisher.handle_report(decoded(rapid_wind_payload))

        assert wait_for(lambda: publisher.stats["published"] == 3)
        topics = [c.args[0] for c in mock_client.publish.call_args_list]
        assert "tempest/instant_wind/speed_magnitude_m_per_s" in topics
        for c in mock_client.publish.call_args_list:
            assert c.kwargs == {"qos": 1, "retain": True}

    def test_custom_prefix(self, mock_client, rapid_wind_payload):
        pub = MQTTPublisher("broker.local", station_elevation=0.0, topic_prefix="home/weather/", client=mock_client)
        pub.handle_report(decoded(rapid_wind_payload))
        topic, _ = pub._queue.get_nowait()
        assert topic.startswith("home/weather/instant_wind/")

    def test_status_messages_are_ignored(self, publisher, device_status_payload, hub_status_payload):
        publisher.handle_report(decoded(device_status_payload))
        publisher.handle_report(decoded(hub_status_payload))
        assert publisher.stats["enqueued"] == 0

    def test_full_queue_drops_without_blocking(self, mock_client, rapid_wind_payload, caplog):
        pub = MQTTPublisher("broker.local", station_elevation=0.0, client=mock_client, max_queue_size=2)
        pub.handle_report(decoded(rapid_wind_payload))

        assert pub.stats["enqueued"] == 2
        assert pub.stats["dropped"] == 1
        assert "Queue full" in caplog.text

    def test_publish_failure_is_counted(self, publisher, mock_client, rapid_wind_payload):
        mock_client.publish.return_value = MagicMock(rc=4)
        publisher.start()
        publisher.handle_report(decoded(rapid_wind_payload))

        assert wait_for(lambda: publisher.stats["errors"] == 3)
        assert publisher.stats["published"] == 0

    def test_shutdown_disconnects_before_stopping_loop(self, publisher, mock_client):
        publisher.start()
        publisher.shutdown()
        names = [c[0] for c in mock_client.mock_calls]
        assert "disconnect" in names
        assert "loop_stop" in names
        assert names.index("disconnect") < names.index("loop_stop")

    def test_shutdown_reports_abandoned_messages(self, publisher, rapid_wind_payload, caplog):
        publisher.handle_report(decoded(rapid_wind_payload))

        assert publisher.shutdown() == 3
        assert publisher.stats["queue_depth"] == 0
        assert publisher.stats["dropped"] == 3
        assert "abandoned 3 queued message" in caplog.text

    def test_clean_shutdown_abandons_nothing(self, publisher):
        assert publisher.shutdown() == 0

    def test_connect_callbacks(self, publisher):
        publisher._on_connect(None, None, None, 0)
        assert publisher.is_connected is True
        publisher._on_disconnect(None, None, None, 7)
        assert publisher.is_connected is False
