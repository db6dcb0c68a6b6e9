"""Transport - UDP reception and JSON reading."""

from .reader import parse_raw_message, read_stream
from .udp_receiver import DEFAULT_PORT, UDPReceiver

__all__ = [
    "DEFAULT_PORT",
    "UDPReceiver",
    "parse_raw_message",
    "read_stream",
]
