"""Bluefruit AT - AT command engine for Adafruit Bluefruit LE modules.

This package provides:
- A request/response engine with deadline-bounded terminator detection
- The hex wire codec used to embed binary fields in commands
- A pyserial transport and the Bluefruit LE command catalogue
- YAML configuration and communication logging
"""

__version__ = "0.1.0"

from bluefruit_at.core import (
    Bluefruit,
    BluefruitError,
    ByteTransport,
    DeviceErrorResponse,
    EngineOptions,
    MalformedHexError,
    RequestEngine,
    RequestResult,
    RequestTimeoutError,
    ResponseStatus,
    SerialPortError,
    SerialTransport,
    decode_hex,
    encode_bytes,
    encode_short,
)

__all__ = [
    "Bluefruit",
    "BluefruitError",
    "ByteTransport",
    "DeviceErrorResponse",
    "EngineOptions",
    "MalformedHexError",
    "RequestEngine",
    "RequestResult",
    "RequestTimeoutError",
    "ResponseStatus",
    "SerialPortError",
    "SerialTransport",
    "decode_hex",
    "encode_bytes",
    "encode_short",
]
