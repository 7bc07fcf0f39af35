"""Bluefruit LE command catalogue.

Each method formats one AT command from the Bluefruit LE command set and
delegates to RequestEngine.request(); binary fields go through the wire
codec. Command reference:
https://learn.adafruit.com/introducing-adafruit-ble-bluetooth-low-energy-friend
"""

from enum import Enum
from typing import Iterable, List, Optional, Union
import logging

from bluefruit_at.core.exceptions import UnexpectedReplyError
from bluefruit_at.core.request_engine import RequestEngine
from bluefruit_at.core.wire_codec import (
    decode_hex_bytes,
    encode_bytes,
    encode_short,
    strip_separators,
)

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, Iterable[int], str]

APPLE_MANUFACTURER_ID = 0x004C
DEFAULT_BEACON_RSSI = -59


class GPIOMode(Enum):
    """Pin mode for AT+HWGPIOMODE."""
    INPUT = 0
    OUTPUT = 1
    INPUT_PULLUP = 2
    OUTPUT_PULLUP = 3


class LEDMode(Enum):
    """Behaviour of the MODE LED for AT+HWMODELED."""
    DISABLE = 0
    MODE = 1
    HWUART = 2
    BLEUART = 3
    SPI = 4
    MANUAL = 5


class LEDModeManual(Enum):
    """LED state used with LEDMode.MANUAL."""
    OFF = 0
    ON = 1
    TOGGLE = 2


class BLEAddressType(Enum):
    """Reply of AT+BLEGETADDRTYPE."""
    PUBLIC = 0
    RANDOM = 1


class Bluefruit:
    """High-level Bluefruit LE API over a RequestEngine.

    Example:
        >>> device = Bluefruit(engine)
        >>> device.test()
        >>> device.set_device_name("Bluefruit 360")
        >>> device.get_ble_power_level()
        0
    """

    def __init__(self, engine: RequestEngine):
        self.engine = engine

    # --- General ---

    def request(self, command: str) -> str:
        """Send a raw AT command and return the reply body."""
        return self.engine.request(command)

    def test(self) -> None:
        """Check the device answers ``AT``; raises on timeout or error."""
        self.engine.test()

    def help(self) -> List[str]:
        """List the AT commands the firmware supports."""
        return self.request("AT+HELP").split(",")

    def dfu(self) -> None:
        """Force the device into DFU mode for an over-the-air update."""
        self.request("AT+DFU")

    def reset(self) -> None:
        """Soft-reset the device."""
        self.request("ATZ")

    def factory_reset(self) -> None:
        """Reset the device to factory defaults."""
        self.request("AT+FACTORYRESET")

    def get_echo(self) -> bool:
        """Whether the device echoes input characters."""
        return self.request("ATE") == "1"

    def set_echo(self, enable: bool) -> None:
        self.request("ATE=" + ("1" if enable else "0"))

    def get_device_info(self) -> str:
        """Board name, serial number, firmware version and so on (ATI)."""
        return self.request("ATI")

    def toggle_data_mode(self) -> str:
        """Switch between DATA and COMMAND mode."""
        return self.request("+++")

    # --- GAP ---

    def get_device_name(self) -> str:
        return self.request("AT+GAPDEVNAME")

    def set_device_name(self, name: str) -> None:
        self.request("AT+GAPDEVNAME=" + name)

    def start_advertising(self) -> None:
        self.request("AT+GAPSTARTADV")

    def stop_advertising(self) -> None:
        self.request("AT+GAPSTOPADV")

    def set_advertising_data(self, data: BytesLike) -> None:
        """Set the raw advertising payload.

        Args:
            data: Payload bytes, or an unseparated hex string such as
                "020106030209180A"
        """
        self.request("AT+GAPSETADVDATA=" + encode_bytes(_as_bytes(data)))

    def get_advertising_intervals(self) -> List[Optional[int]]:
        """Connection and advertising intervals in milliseconds.

        Returns:
            [min_connection, max_connection, advertising_interval,
            advertising_timeout]; fields the device leaves blank or
            non-numeric are None
        """
        values = self.request("AT+GAPINTERVALS").split(",")
        result: List[Optional[int]] = []
        for i in range(4):
            value = values[i].strip() if i < len(values) else ""
            try:
                result.append(int(value))
            except ValueError:
                result.append(None)
        return result

    def set_advertising_intervals(self,
                                  min_connection_interval: Optional[int],
                                  max_connection_interval: Optional[int],
                                  advertising_interval: Optional[int],
                                  advertising_timeout: Optional[int]) -> None:
        """Set intervals in milliseconds; None leaves a field unchanged."""
        fields = [min_connection_interval, max_connection_interval,
                  advertising_interval, advertising_timeout]
        self.request("AT+GAPINTERVALS=" + ",".join(
            "" if value is None else str(value) for value in fields
        ))

    # --- GATT ---

    def add_gatt_service(self, uuid: str) -> str:
        """Add a GATT service; returns the service index."""
        return self.request("AT+GATTADDSERVICE=UUID=" + uuid)

    def add_gatt_characteristic(self,
                                uuid: str,
                                properties: str,
                                min_length: Optional[int] = None,
                                max_length: Optional[int] = None,
                                value: Optional[BytesLike] = None) -> str:
        """Add a characteristic to the last service; returns its index."""
        command = f"AT+GATTADDCHAR=UUID={uuid}, PROPERTIES={properties}"
        if min_length is not None:
            command += f", MIN_LEN={min_length}"
        if max_length is not None:
            command += f", MAX_LEN={max_length}"
        if value is not None:
            command += ", VALUE=" + encode_bytes(_as_bytes(value))
        return self.request(command)

    # --- Beacons ---

    def set_ble_beacon(self,
                       uuid: BytesLike,
                       major: int,
                       minor: int,
                       manufacturer_id: int = APPLE_MANUFACTURER_ID,
                       rssi: int = DEFAULT_BEACON_RSSI) -> None:
        """Advertise as an iBeacon.

        Args:
            uuid: 16-byte proximity UUID, as bytes or hex text
            major: Major value (16 bit)
            minor: Minor value (16 bit)
            manufacturer_id: Company identifier (default Apple, 0x004C)
            rssi: Calibrated RSSI at 1 m in dBm (default -59)
        """
        self.request("AT+BLEBEACON=" + ",".join([
            encode_short(manufacturer_id),
            encode_bytes(_as_bytes(uuid)),
            encode_short(major),
            encode_short(minor),
            str(rssi),
        ]))

    def set_ble_uri_beacon(self, uri: str) -> None:
        self.request("AT+BLEURIBEACON=" + uri)

    def get_eddystone_enable(self) -> bool:
        command = "AT+EDDYSTONEENABLE"
        return _parse_int(command, self.request(command)) == 1

    def set_eddystone_enable(self, enable: bool) -> None:
        self.request("AT+EDDYSTONEENABLE=" + ("1" if enable else "0"))

    def set_eddystone_url(self, url: str, advertise: bool = False) -> None:
        """Set the Eddystone URL; ``advertise`` keeps advertising when connected."""
        self.request("AT+EDDYSTONEURL=" + url + (",1" if advertise else ""))

    def set_eddystone_config(self, seconds: int) -> None:
        """Open the Eddystone configuration service for ``seconds``."""
        self.request(f"AT+EDDYSTONECONFIGEN={seconds}")

    # --- BLE ---

    def get_ble_address_type(self) -> BLEAddressType:
        command = "AT+BLEGETADDRTYPE"
        reply = self.request(command)
        try:
            return BLEAddressType(_parse_int(command, reply))
        except ValueError as e:
            raise UnexpectedReplyError("Unknown address type", command, reply) from e

    def get_ble_address(self) -> str:
        return self.request("AT+BLEGETADDR")

    def get_ble_peer_address(self) -> str:
        """Address of the connected central."""
        return self.request("AT+BLEGETPEERADDR")

    def get_ble_rssi(self) -> int:
        """RSSI of the current connection in dBm."""
        command = "AT+BLEGETRSSI"
        return _parse_int(command, self.request(command))

    def get_ble_power_level(self) -> int:
        command = "AT+BLEPOWERLEVEL"
        return _parse_int(command, self.request(command))

    def set_ble_power_level(self, dbm: int) -> None:
        self.request(f"AT+BLEPOWERLEVEL={dbm}")

    # --- Hardware ---

    def get_adc_pin_value(self, pin: int) -> int:
        """Raw ADC conversion on channel 0-7."""
        command = f"AT+HWADC={pin}"
        return _parse_int(command, self.request(command))

    def get_gpio_pin_value(self, pin: int) -> bool:
        """True for HIGH, False for LOW."""
        command = f"AT+HWGPIO={pin}"
        return _parse_int(command, self.request(command)) == 1

    def set_gpio_pin_value(self, pin: int, state: bool) -> None:
        self.request(f"AT+HWGPIO={pin}," + ("1" if state else "0"))

    def get_gpio_pin_mode(self, pin: int) -> GPIOMode:
        command = f"AT+HWGPIOMODE={pin}"
        reply = self.request(command)
        try:
            return GPIOMode(_parse_int(command, reply))
        except ValueError as e:
            raise UnexpectedReplyError("Unknown GPIO mode", command, reply) from e

    def set_gpio_pin_mode(self, pin: int, mode: GPIOMode) -> None:
        self.request(f"AT+HWGPIOMODE={pin},{mode.value}")

    def get_die_temperature(self) -> float:
        """Temperature of the module's die in degrees Celsius."""
        command = "AT+HWGETDIETEMP"
        reply = self.request(command)
        try:
            return float(reply.strip())
        except ValueError as e:
            raise UnexpectedReplyError("Expected a number", command, reply) from e

    def scan_i2c(self) -> List[str]:
        """Addresses (hex text) of the I2C devices that answered."""
        return self.request("AT+HWI2CSCAN").split(",")

    def get_power_supply_voltage(self) -> int:
        """Supply voltage in millivolts."""
        command = "AT+HWVBAT"
        return _parse_int(command, self.request(command))

    def get_random_value(self) -> str:
        """32-bit random number from the radio, as hex text."""
        return self.request("AT+HWRANDOM")

    def get_led_mode(self) -> LEDMode:
        """Current MODE LED behaviour; firmware replies by number or by name."""
        command = "AT+HWMODELED"
        reply = self.request(command)
        key = reply.strip().lower()
        for mode in LEDMode:
            if key in (str(mode.value), mode.name.lower()):
                return mode
        raise UnexpectedReplyError("Unknown LED mode", command, reply)

    def set_led_mode(self, mode: LEDMode,
                     manual: Optional[LEDModeManual] = None) -> None:
        command = "AT+HWMODELED=" + mode.name
        if manual is not None:
            command += "," + manual.name
        self.request(command)


def _as_bytes(data: BytesLike) -> bytes:
    """Normalise a payload argument to bytes; hex text may contain dashes."""
    if isinstance(data, str):
        return decode_hex_bytes(strip_separators(data))
    return bytes(data)


def _parse_int(command: str, reply: str) -> int:
    try:
        return int(reply.strip())
    except ValueError as e:
        logger.debug("Non-integer reply to %s: %r", command, reply)
        raise UnexpectedReplyError("Expected an integer", command, reply) from e
