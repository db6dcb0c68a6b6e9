"""Command line entry point: UDP -> decoder -> exporter / MQTT, plus HTTP."""

from __future__ import annotations

import argparse
import itertools
import logging
import threading
from datetime import timedelta
from typing import List, Optional, Sequence

import uvicorn

from common.config import ConfigError, Settings, get_settings, validate_station_elevation

from .core.adapters import decode_stream
from .core.monitoring import Stats
from .core.pipeline import MessagePump
from .core.transport import UDPReceiver, read_stream
from .main import create_app
from .metrics import Exporter
from .mqtt import MQTTPublisher

logger = logging.getLogger(__name__)

LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tempest-exporter",
        description="Prometheus exporter and MQTT republisher for WeatherFlow Tempest stations",
    )
    p.add_argument(
        "--station-elevation",
        type=float,
        default=settings.station_elevation,
        help="station elevation in meters, used to compute barometric pressure",
    )
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=settings.log_level)
    p.add_argument("--udp-host", default=settings.udp_host)
    p.add_argument("--udp-port", type=int, default=settings.udp_port)
    p.add_argument("--metrics-host", default=settings.metrics_host)
    p.add_argument("--metrics-port", type=int, default=settings.metrics_port)
    p.add_argument("--mqtt-broker", default=settings.mqtt_broker_host, help="MQTT broker address; MQTT is off when unset")
    p.add_argument("--mqtt-port", type=int, default=settings.mqtt_broker_port)
    p.add_argument("--mqtt-username", default=settings.mqtt_username)
    p.add_argument("--mqtt-password", default=settings.mqtt_password)
    p.add_argument("--mqtt-topic-prefix", default=settings.mqtt_topic_prefix)
    p.add_argument("--dump-metrics", action="store_true", help="log the metric exposition on shutdown")
    return p


def _exit_when_pump_stops(pump_thread: threading.Thread, server: uvicorn.Server) -> None:
    # Upstream exhaustion ends the whole process.
    pump_thread.join()
    logger.info("Message pump exited, stopping web server")
    server.should_exit = True


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = get_settings()
    except ValueError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Invalid configuration: %s", e)
        return 2

    p = build_parser(settings)
    args = p.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        # Defaults from LOG_LEVEL bypass argparse choices.
        p.error(f"unknown log level {args.log_level!r}")

    logging.basicConfig(
        level=getattr(logging, args.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    try:
        elevation = validate_station_elevation(args.station_elevation)
    except ConfigError as e:
        p.error(str(e))

    logger.info("Starting Tempest exporter")
    logger.info(
        "Config: elevation=%.1fm udp=%s:%d metrics=%s:%d mqtt=%s",
        elevation,
        args.udp_host,
        args.udp_port,
        args.metrics_host,
        args.metrics_port,
        args.mqtt_broker or "disabled",
    )

    stats = Stats()
    exporter = Exporter(
        station_elevation=elevation,
        rapid_wind_ttl=timedelta(seconds=settings.rapid_wind_ttl_seconds),
        status_ttl=timedelta(seconds=settings.status_ttl_seconds),
        observation_ttl_factor=settings.observation_ttl_factor,
        stats=stats,
    )
    sinks: List[object] = [exporter]

    publisher: Optional[MQTTPublisher] = None
    if args.mqtt_broker:
        publisher = MQTTPublisher(
            broker_host=args.mqtt_broker,
            broker_port=args.mqtt_port,
            username=args.mqtt_username,
            password=args.mqtt_password,
            topic_prefix=args.mqtt_topic_prefix,
            station_elevation=elevation,
        )
        publisher.start()
        sinks.append(publisher)

    receiver = UDPReceiver(host=args.udp_host, port=args.udp_port)
    pump: Optional[MessagePump] = None
    try:
        receiver.open()
        messages = decode_stream(read_stream(receiver, stats), stats)

        first = next(messages, None)
        if first is None:
            logger.error("Decoder stream never returned anything")
            return 1
        logger.info("Tempest API is alive")

        pump = MessagePump(itertools.chain([first], messages), sinks, stats)
        pump_thread = pump.start()

        app = create_app(exporter, pump=pump, stats=stats)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=args.metrics_host,
                port=args.metrics_port,
                log_level=args.log_level.lower(),
            )
        )
        threading.Thread(
            target=_exit_when_pump_stops,
            args=(pump_thread, server),
            daemon=True,
            name="pump-watch",
        ).start()
        server.run()
    finally:
        logger.info("Shutdown initiated")
        receiver.stop()
        if pump is not None:
            pump.stop(timeout=3.0)
        if publisher is not None:
            publisher.shutdown()
        receiver.close()
        if args.dump_metrics:
            exporter.dump()
        logger.info("Terminating. %s", stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
