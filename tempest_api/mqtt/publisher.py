"""MQTT republisher for decoded Tempest messages.

Flow:
  MessagePump -> handle_report() -> bounded queue -> worker thread
  -> paho client (QoS 1, retained)

``handle_report`` never blocks the pump: when the queue is full the
message is dropped with a warning.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import List, Optional, Tuple

import paho.mqtt.client as mqtt

from ..core.domain import Observation, RapidWind, TempestMessage, Wind

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1024
DEFAULT_KEEPALIVE = 15
DEFAULT_CLIENT_ID = "tempest-exporter"
PUBLISH_QOS = 1

Message = Tuple[str, str]


def wind_messages(prefix: str, wind: Wind) -> List[Message]:
    north, east = wind.component_velocity()
    return [
        (f"{prefix}/speed_magnitude_m_per_s", str(wind.speed_magnitude)),
        (f"{prefix}/source_direction_deg", str(wind.source_direction)),
        (f"{prefix}/component_velocity_m_per_s", f"{north} {east}"),
    ]


def observation_messages(prefix: str, obs: Observation, station_elevation: float) -> List[Message]:
    """Topic/payload pairs for one observation. Absent values are skipped."""
    base = f"{prefix}/observation"
    messages: List[Message] = [(f"{base}/timestamp", obs.timestamp.isoformat())]

    if obs.wind is not None:
        messages += wind_messages(f"{base}/wind/lull", obs.wind.lull)
        messages += wind_messages(f"{base}/wind/avg", obs.wind.avg)
        messages += wind_messages(f"{base}/wind/gust", obs.wind.gust)

    scalars = [
        ("pressure/station_hpa", obs.station_pressure),
        ("pressure/barometric_hpa", obs.barometric_pressure(station_elevation)),
        ("thermal/temperature_deg_c", obs.air_temperature),
        ("thermal/relative_humidity_pct", obs.relative_humidity),
        ("thermal/dew_point_deg_c", obs.dew_point()),
        ("thermal/wet_bulb_temperature_deg_c", obs.wet_bulb_temperature()),
        ("thermal/apparent_temperature_deg_c", obs.apparent_temperature()),
    ]
    if obs.solar is not None:
        scalars += [
            ("solar/illuminance_lux", obs.solar.illuminance),
            ("solar/irradiance_w_per_m2", obs.solar.irradiance),
            ("solar/uv_index", obs.solar.ultraviolet_index),
        ]
    if obs.precip is not None:
        scalars.append(("precip/previous_minute_rain_mm", obs.precip.quantity_last_minute))

    for suffix, value in scalars:
        if value is None:
            continue
        messages.append((f"{base}/{suffix}", str(value)))
    return messages


class MQTTPublisher:
    """Publishes rapid wind and observations to an MQTT broker.

    Uses paho-mqtt directly. The network loop runs on paho's own thread
    (``loop_start``); publishing happens on a single worker thread fed by
    a bounded queue.

    Usage:
        publisher = MQTTPublisher("broker.local", station_elevation=120.0)
        publisher.start()
        publisher.handle_report(observation)
        publisher.shutdown()
    """

    def __init__(
        self,
        broker_host: str,
        station_elevation: float,
        broker_port: int = 1883,
        username: Optional[str] = None,
        password: Optional[str] = None,
        topic_prefix: str = "tempest",
        client_id: str = DEFAULT_CLIENT_ID,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        client: Optional[mqtt.Client] = None,
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.station_elevation = station_elevation
        self.topic_prefix = topic_prefix.rstrip("/")

        if client is None:
            client = mqtt.Client(
                client_id=client_id,
                protocol=mqtt.MQTTv311,
                callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            )
        self._client = client
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        if username:
            self._client.username_pw_set(username, password)

        self._queue: "queue.Queue[Message]" = queue.Queue(maxsize=max_queue_size)
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._connected = False

        self._lock = threading.Lock()
        self._enqueued = 0
        self._dropped = 0
        self._published = 0
        self._errors = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        logger.info("[MQTT] Connecting to %s:%d", self.broker_host, self.broker_port)
        self._client.connect_async(self.broker_host, self.broker_port, keepalive=DEFAULT_KEEPALIVE)
        self._client.loop_start()

        self._stop_event.clear()
        self._worker = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name="mqtt-publisher",
        )
        self._worker.start()

    def shutdown(self) -> int:
        """Stop publishing and disconnect.

        Messages still queued are not published.

        Returns:
            Number of abandoned messages.
        """
        self._stop_event.set()
        if self._worker is not None:
            self._worker.join(timeout=5.0)
            self._worker = None

        abandoned = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            self._queue.task_done()
            abandoned += 1
        if abandoned:
            with self._lock:
                self._dropped += abandoned
            logger.warning("[MQTT] Shutdown abandoned %d queued message(s)", abandoned)

        # DISCONNECT goes out through the network loop, so stop it last.
        self._client.disconnect()
        self._client.loop_stop()
        logger.info("[MQTT] Stopped. %s", self.stats)
        return abandoned

    stop = shutdown

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def handle_report(self, message: TempestMessage) -> None:
        if isinstance(message, RapidWind):
            messages = wind_messages(f"{self.topic_prefix}/instant_wind", message.wind)
        elif isinstance(message, Observation):
            messages = observation_messages(self.topic_prefix, message, self.station_elevation)
        else:
            return
        for topic, payload in messages:
            self.enqueue(topic, payload)

    def enqueue(self, topic: str, payload: str) -> bool:
        """Queue one retained message. Returns False if the queue is full."""
        try:
            self._queue.put_nowait((topic, payload))
        except queue.Full:
            with self._lock:
                self._dropped += 1
            logger.warning("[MQTT] Queue full, dropped topic=%s", topic)
            return False
        with self._lock:
            self._enqueued += 1
        return True

    def _worker_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                topic, payload = self._queue.get(timeout=1.0)
            except queue.Empty:
                continue
            try:
                self._publish(topic, payload)
            finally:
                self._queue.task_done()

    def _publish(self, topic: str, payload: str) -> None:
        info = self._client.publish(topic, payload, qos=PUBLISH_QOS, retain=True)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            with self._lock:
                self._errors += 1
            logger.error("[MQTT] Publish failed topic=%s rc=%s", topic, info.rc)
            return
        with self._lock:
            self._published += 1

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code == 0:
            self._connected = True
            logger.info("[MQTT] Connected to MQTT broker")
        else:
            self._connected = False
            logger.error("[MQTT] Connection failed: rc=%s", reason_code)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        logger.warning("[MQTT] Disconnected (rc=%s)", reason_code)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                "connected": self._connected,
                "queue_depth": self._queue.qsize(),
                "queue_max": self._queue.maxsize,
                "enqueued": self._enqueued,
                "dropped": self._dropped,
                "published": self._published,
                "errors": self._errors,
            }
