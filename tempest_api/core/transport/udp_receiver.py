"""UDP receiver for the Tempest hub broadcasts.

The hub broadcasts one JSON object per datagram on port 50222. The receiver
is an iterator of raw datagram payloads; it ends when :meth:`stop` is
called or the socket fails, which terminates the whole pipeline.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_PORT = 50222
DEFAULT_BUFFER_SIZE = 1024


class UDPReceiver:
    """Iterable UDP datagram source.

    Usage:
        with UDPReceiver(port=50222) as receiver:
            for datagram in receiver:
                ...
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        poll_timeout: float = 1.0,
    ):
        self.host = host
        self.port = port
        self.buffer_size = buffer_size
        self.poll_timeout = poll_timeout

        self._sock: Optional[socket.socket] = None
        self._stop_event = threading.Event()
        self._received = 0

    def open(self) -> None:
        if self._sock is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(self.poll_timeout)
        sock.bind((self.host, self.port))
        self._sock = sock
        self._stop_event.clear()
        logger.info("[UDP] Listening on %s:%d", self.host, self.bound_port)

    def close(self) -> None:
        self._stop_event.set()
        if self._sock is not None:
            self._sock.close()
            self._sock = None
            logger.info("[UDP] Closed after %d datagrams", self._received)

    def stop(self) -> None:
        """Ask the iterator to finish after the current poll."""
        self._stop_event.set()

    def __enter__(self) -> "UDPReceiver":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[bytes]:
        self.open()
        while not self._stop_event.is_set():
            sock = self._sock
            if sock is None:
                break
            try:
                payload, _addr = sock.recvfrom(self.buffer_size)
            except socket.timeout:
                continue
            except OSError as e:
                if self._stop_event.is_set():
                    break
                logger.warning("[UDP] Receiver terminated: socket error %s", e)
                break
            self._received += 1
            yield payload

    @property
    def bound_port(self) -> int:
        if self._sock is None:
            return self.port
        return self._sock.getsockname()[1]

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    @property
    def received(self) -> int:
        return self._received
