"""Hex encodings used to embed binary fields in Bluefruit AT commands.

Two wire sub-formats exist and they are deliberately not symmetric:

- ``encode_bytes`` emits dash-joined byte pairs (``01-02-AB``), the form
  commands such as ``AT+GAPSETADVDATA`` and ``AT+BLEBEACON`` expect.
- ``decode_hex`` parses an unseparated string (``0102AB``), the form users
  type for UUIDs and advertising payloads.

Callers that want to feed the output of ``encode_bytes`` back into
``decode_hex`` must remove the separators first (see ``strip_separators``).
``encode_short`` renders 16-bit fields as ``0xHHHH``, most significant byte
first.
"""

import string
from typing import Iterable, Iterator

from bluefruit_at.core.exceptions import MalformedHexError

_HEX_DIGITS = frozenset(string.hexdigits)


def encode_short(value: int) -> str:
    """Render a 16-bit unsigned value as ``0x`` plus four uppercase digits.

    Args:
        value: Integer in the range 0..0xFFFF

    Returns:
        String such as ``'0x004C'``

    Raises:
        ValueError: value does not fit in 16 bits

    Example:
        >>> encode_short(0x0041)
        '0x0041'
    """
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"Value {value} does not fit in 16 bits")
    return f"0x{value:04X}"


def encode_bytes(data: Iterable[int]) -> str:
    """Render bytes as uppercase hex pairs joined by ``-``.

    Args:
        data: bytes, bytearray or any iterable of ints in 0..255

    Returns:
        Dash-joined hex string; empty input gives an empty string

    Raises:
        ValueError: an item is outside 0..255

    Example:
        >>> encode_bytes([0x01, 0x02, 0xAB])
        '01-02-AB'
    """
    pairs = []
    for item in data:
        if not 0 <= item <= 0xFF:
            raise ValueError(f"Byte value {item} out of range")
        pairs.append(f"{item:02X}")
    return "-".join(pairs)


def decode_hex(text: str) -> Iterator[int]:
    """Parse an unseparated hex string into byte values, lazily.

    The length check happens immediately; each pair is validated as it is
    consumed, so a bad character surfaces when iteration reaches it. Calling
    ``decode_hex`` again on the same text yields the same sequence.

    Args:
        text: Hex digits, two per byte, no separators

    Returns:
        Iterator over ints in 0..255, in input order

    Raises:
        MalformedHexError: text has odd length, or (during iteration)
            contains a non-hex character

    Example:
        >>> list(decode_hex("0102AB"))
        [1, 2, 171]
    """
    if len(text) % 2 == 1:
        raise MalformedHexError("Expected hex string aligned to 2 characters", text)
    return _iter_pairs(text)


def _iter_pairs(text: str) -> Iterator[int]:
    for i in range(0, len(text), 2):
        pair = text[i:i + 2]
        # int(..., 16) tolerates signs and whitespace, so check digits first
        if not _HEX_DIGITS.issuperset(pair):
            raise MalformedHexError(f"Invalid hex pair {pair!r} at offset {i}", text)
        yield int(pair, 16)


def decode_hex_bytes(text: str) -> bytes:
    """Decode an unseparated hex string into a bytes object."""
    return bytes(decode_hex(text))


def strip_separators(text: str, separators: str = "-:") -> str:
    """Remove separator characters so a joined hex string can be decoded.

    Example:
        >>> strip_separators("01-02-AB")
        '0102AB'
    """
    return "".join(ch for ch in text if ch not in separators)
