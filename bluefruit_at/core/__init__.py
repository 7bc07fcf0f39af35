"""Core AT command engine components.

This package provides the wire codec, the byte transport abstraction with
its pyserial implementation, the request engine and the Bluefruit LE
command catalogue built on top of it.
"""

from bluefruit_at.core.exceptions import (
    BluefruitError,
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError,
    RequestError,
    RequestTimeoutError,
    DeviceErrorResponse,
    MalformedHexError,
    UnexpectedReplyError,
    ConfigurationError,
)
from bluefruit_at.core.wire_codec import (
    encode_short,
    encode_bytes,
    decode_hex,
    decode_hex_bytes,
    strip_separators,
)
from bluefruit_at.core.transport import ByteTransport
from bluefruit_at.core.serial_transport import SerialTransport, PortInfo
from bluefruit_at.core.request_result import RequestResult, ResponseStatus
from bluefruit_at.core.request_engine import RequestEngine, EngineOptions
from bluefruit_at.core.bluefruit import (
    Bluefruit,
    GPIOMode,
    LEDMode,
    LEDModeManual,
    BLEAddressType,
)

__all__ = [
    'BluefruitError',
    'SerialPortError',
    'SerialPortBusyError',
    'ConnectionTimeoutError',
    'RequestError',
    'RequestTimeoutError',
    'DeviceErrorResponse',
    'MalformedHexError',
    'UnexpectedReplyError',
    'ConfigurationError',
    'encode_short',
    'encode_bytes',
    'decode_hex',
    'decode_hex_bytes',
    'strip_separators',
    'ByteTransport',
    'SerialTransport',
    'PortInfo',
    'RequestResult',
    'ResponseStatus',
    'RequestEngine',
    'EngineOptions',
    'Bluefruit',
    'GPIOMode',
    'LEDMode',
    'LEDModeManual',
    'BLEAddressType',
]
