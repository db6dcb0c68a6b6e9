"""MQTT republishing of decoded station messages."""

from .publisher import MQTTPublisher, observation_messages, wind_messages

__all__ = ["MQTTPublisher", "observation_messages", "wind_messages"]
