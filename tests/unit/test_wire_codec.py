"""Unit tests for the hex wire codec."""

import pytest

from bluefruit_at.core.exceptions import BluefruitError, MalformedHexError
from bluefruit_at.core.wire_codec import (
    decode_hex,
    decode_hex_bytes,
    encode_bytes,
    encode_short,
    strip_separators,
)


class TestEncodeShort:
    """Test 16-bit field rendering."""

    @pytest.mark.parametrize("value,expected", [
        (0x0041, "0x0041"),
        (0x004C, "0x004C"),
        (0, "0x0000"),
        (0xFFFF, "0xFFFF"),
        (0xABCD, "0xABCD"),
    ])
    def test_encode(self, value, expected):
        """Test values render as 0x plus four uppercase digits."""
        assert encode_short(value) == expected

    @pytest.mark.parametrize("value", [-1, 0x10000])
    def test_out_of_range(self, value):
        """Test values outside 16 bits are rejected."""
        with pytest.raises(ValueError):
            encode_short(value)


class TestEncodeBytes:
    """Test dash-joined byte rendering."""

    def test_encode(self):
        """Test bytes render as uppercase pairs joined by dashes."""
        assert encode_bytes([0x01, 0x02, 0xAB]) == "01-02-AB"

    def test_encode_bytes_object(self):
        """Test a bytes object is accepted."""
        assert encode_bytes(b"\x00\xff") == "00-FF"

    def test_single_byte(self):
        """Test one byte has no separator."""
        assert encode_bytes([0x0A]) == "0A"

    def test_empty(self):
        """Test empty input gives an empty string."""
        assert encode_bytes([]) == ""

    def test_generator_input(self):
        """Test any iterable of ints is accepted."""
        assert encode_bytes(x for x in (1, 2)) == "01-02"

    @pytest.mark.parametrize("item", [-1, 256])
    def test_out_of_range(self, item):
        """Test items outside a byte are rejected."""
        with pytest.raises(ValueError):
            encode_bytes([0x01, item])


class TestDecodeHex:
    """Test unseparated hex parsing."""

    def test_decode(self):
        """Test pairs decode in input order."""
        assert list(decode_hex("0102AB")) == [0x01, 0x02, 0xAB]

    def test_lowercase(self):
        """Test lowercase digits are accepted."""
        assert list(decode_hex("abcdef")) == [0xAB, 0xCD, 0xEF]

    def test_empty(self):
        """Test empty input yields nothing."""
        assert list(decode_hex("")) == []

    def test_uuid(self):
        """Test a 128-bit UUID decodes to sixteen bytes."""
        data = decode_hex_bytes("E2C56DB5DFFB48D2B060D0F5A71096E0")

        assert len(data) == 16
        assert data[0] == 0xE2
        assert data[-1] == 0xE0

    def test_odd_length_raises_immediately(self):
        """Test odd length fails before iteration starts."""
        with pytest.raises(MalformedHexError) as exc_info:
            decode_hex("ABC")

        assert exc_info.value.text == "ABC"
        assert "aligned to 2" in str(exc_info.value)

    def test_bad_character_raises_during_iteration(self):
        """Test a non-hex pair fails when iteration reaches it."""
        values = decode_hex("01ZZ")

        assert next(values) == 0x01
        with pytest.raises(MalformedHexError) as exc_info:
            next(values)

        assert "offset 2" in str(exc_info.value)

    @pytest.mark.parametrize("text", ["+1", " 1", "1 ", "-1", "0x"])
    def test_rejects_int_parser_leniency(self, text):
        """Test signs, whitespace and prefixes are not hex digits."""
        with pytest.raises(MalformedHexError):
            list(decode_hex(text))

    def test_dashed_input_rejected(self):
        """Test encoded output cannot be decoded without stripping dashes."""
        with pytest.raises(MalformedHexError):
            list(decode_hex("01-02"))

    def test_restartable(self):
        """Test decoding the same text twice gives the same sequence."""
        assert list(decode_hex("0A0B")) == list(decode_hex("0A0B"))

    def test_error_is_value_error(self):
        """Test MalformedHexError can be caught as ValueError or BluefruitError."""
        with pytest.raises(ValueError):
            decode_hex("1")
        with pytest.raises(BluefruitError):
            decode_hex("1")


class TestStripSeparators:
    """Test separator removal."""

    def test_strip_dashes(self):
        """Test encode output becomes decodable after stripping."""
        encoded = encode_bytes([0x01, 0x02, 0xAB])

        assert list(decode_hex(strip_separators(encoded))) == [0x01, 0x02, 0xAB]

    def test_every_byte_value_survives(self):
        """Test all 256 byte values come back after stripping separators."""
        data = bytes(range(256))

        assert decode_hex_bytes(strip_separators(encode_bytes(data))) == data

    def test_decoded_length_is_half(self):
        """Test an even-length hex string yields len/2 bytes in order."""
        text = "".join(f"{i:02X}" for i in range(0, 256, 17))

        decoded = list(decode_hex(text))

        assert len(decoded) == len(text) // 2
        assert decoded == list(range(0, 256, 17))

    def test_strip_colons(self):
        """Test colon-separated addresses are stripped too."""
        assert strip_separators("AA:BB:CC") == "AABBCC"

    def test_custom_separators(self):
        """Test caller-supplied separator set."""
        assert strip_separators("01 02", separators=" ") == "0102"
