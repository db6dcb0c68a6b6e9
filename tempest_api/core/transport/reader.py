"""JSON reader: datagram payloads → raw messages."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Union

import orjson
from pydantic import ValidationError

from ..monitoring.stats import Stats
from ..validation.raw_messages import RAW_MESSAGE_ADAPTER, RawMessage

logger = logging.getLogger(__name__)


def parse_raw_message(payload: Union[bytes, str]) -> RawMessage:
    """Parse one datagram.

    Raises:
        orjson.JSONDecodeError: payload is not JSON.
        pydantic.ValidationError: unknown ``type`` or wrong field shapes.
    """
    return RAW_MESSAGE_ADAPTER.validate_python(orjson.loads(payload))


def read_stream(
    datagrams: Iterable[Union[bytes, str]],
    stats: Optional[Stats] = None,
) -> Iterator[RawMessage]:
    """Yield raw messages, dropping unreadable datagrams with a warning."""
    for payload in datagrams:
        if stats is not None:
            stats.received += 1
        try:
            raw = parse_raw_message(payload)
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.warning("[READER] Dropped unreadable message: %r", payload)
            logger.warning("[READER] .. error was: %s", e)
            if stats is not None:
                stats.unreadable += 1
            continue
        yield raw
