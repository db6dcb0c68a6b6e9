"""Adapters - raw message decoding."""

from .decoder import (
    DecodeError,
    DecodeResult,
    InvalidFieldError,
    MissingFieldError,
    UnrecognizedCodeError,
    decode_message,
    decode_stream,
)

__all__ = [
    "DecodeError",
    "DecodeResult",
    "InvalidFieldError",
    "MissingFieldError",
    "UnrecognizedCodeError",
    "decode_message",
    "decode_stream",
]
