"""Tests for the command line front end (no sockets opened)."""

from unittest.mock import patch

import pytest

from common.config import get_settings
from tempest_api import cli


class TestParser:

    def test_environment_provides_defaults(self, clean_env):
        clean_env.setenv("TEMPEST_STATION_ELEVATION", "42")
        clean_env.setenv("MQTT_BROKER_HOST", "mqtt.local")
        args = cli.build_parser(get_settings()).parse_args([])
        assert args.station_elevation == 42
        assert args.mqtt_broker == "mqtt.local"
        assert args.udp_port == 50222

    def test_options_override_environment(self, clean_env):
        clean_env.setenv("TEMPEST_STATION_ELEVATION", "42")
        args = cli.build_parser(get_settings()).parse_args(
            ["--station-elevation", "7", "--metrics-port", "9100", "--log-level", "debug"]
        )
        assert args.station_elevation == 7
        assert args.metrics_port == 9100
        assert args.log_level == "DEBUG"


class TestMain:

    @pytest.mark.parametrize("argv", [[], ["--station-elevation", "-5"], ["--station-elevation", "nan"]])
    def test_invalid_elevation_exits_before_binding(self, clean_env, argv):
        with patch.object(cli, "UDPReceiver") as receiver_cls:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(argv)
        assert exc_info.value.code == 2
        receiver_cls.assert_not_called()

    def test_invalid_environment(self, clean_env):
        clean_env.setenv("TEMPEST_UDP_PORT", "not-a-port")
        assert cli.main([]) == 2

    def test_empty_upstream_fails(self, clean_env):
        with patch.object(cli, "UDPReceiver") as receiver_cls:
            receiver_cls.return_value.__iter__.return_value = iter([])
            assert cli.main(["--station-elevation", "10"]) == 1
        receiver_cls.return_value.close.assert_called_once()

    def test_mqtt_broker_enables_publisher(self, clean_env):
        with patch.object(cli, "UDPReceiver") as receiver_cls, patch.object(cli, "MQTTPublisher") as publisher_cls:
            receiver_cls.return_value.__iter__.return_value = iter([])
            assert cli.main(["--station-elevation", "10", "--mqtt-broker", "mqtt.local"]) == 1
        assert publisher_cls.call_args.kwargs["broker_host"] == "mqtt.local"
        publisher_cls.return_value.start.assert_called_once()
        publisher_cls.return_value.shutdown.assert_called_once()

    def test_no_broker_means_no_publisher(self, clean_env):
        with patch.object(cli, "UDPReceiver") as receiver_cls, patch.object(cli, "MQTTPublisher") as publisher_cls:
            receiver_cls.return_value.__iter__.return_value = iter([])
            cli.main(["--station-elevation", "10"])
        publisher_cls.assert_not_called()
