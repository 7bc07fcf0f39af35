"""Unit tests for the Bluefruit command catalogue with a mocked engine."""

import pytest
from unittest.mock import Mock

from bluefruit_at.core.bluefruit import (
    Bluefruit,
    BLEAddressType,
    GPIOMode,
    LEDMode,
    LEDModeManual,
)
from bluefruit_at.core.exceptions import (
    DeviceErrorResponse,
    MalformedHexError,
    UnexpectedReplyError,
)
from bluefruit_at.core.request_engine import RequestEngine

BEACON_UUID = "E2C56DB5DFFB48D2B060D0F5A71096E0"


@pytest.fixture
def engine():
    mock_engine = Mock(spec=RequestEngine)
    mock_engine.request.return_value = ""
    return mock_engine


@pytest.fixture
def device(engine):
    return Bluefruit(engine)


def sent(engine):
    return engine.request.call_args.args[0]


class TestGeneralCommands:
    """Test general device commands."""

    @pytest.mark.parametrize("method,command", [
        ("dfu", "AT+DFU"),
        ("reset", "ATZ"),
        ("factory_reset", "AT+FACTORYRESET"),
        ("start_advertising", "AT+GAPSTARTADV"),
        ("stop_advertising", "AT+GAPSTOPADV"),
    ])
    def test_no_argument_commands(self, device, engine, method, command):
        """Test simple commands send the expected text."""
        getattr(device, method)()

        engine.request.assert_called_once_with(command)

    def test_test_delegates_to_engine(self, device, engine):
        """Test test() uses the engine liveness probe."""
        device.test()

        engine.test.assert_called_once_with()

    def test_raw_request(self, device, engine):
        """Test raw commands pass through unchanged."""
        engine.request.return_value = "reply"

        assert device.request("AT+FOO=1") == "reply"
        engine.request.assert_called_once_with("AT+FOO=1")

    def test_help_splits_commands(self, device, engine):
        """Test AT+HELP reply is split on commas."""
        engine.request.return_value = "AT+FACTORYRESET,AT+DFU,ATZ"

        assert device.help() == ["AT+FACTORYRESET", "AT+DFU", "ATZ"]

    @pytest.mark.parametrize("reply,expected", [("1", True), ("0", False)])
    def test_get_echo(self, device, engine, reply, expected):
        """Test echo state parsing."""
        engine.request.return_value = reply

        assert device.get_echo() is expected
        assert sent(engine) == "ATE"

    @pytest.mark.parametrize("enable,command", [(True, "ATE=1"), (False, "ATE=0")])
    def test_set_echo(self, device, engine, enable, command):
        """Test echo state formatting."""
        device.set_echo(enable)

        assert sent(engine) == command

    def test_device_info(self, device, engine):
        """Test ATI reply is returned verbatim."""
        engine.request.return_value = "BLEFRIEND32\r\nnRF51822 QFACA10"

        assert device.get_device_info() == "BLEFRIEND32\r\nnRF51822 QFACA10"

    def test_toggle_data_mode(self, device, engine):
        """Test +++ is sent."""
        device.toggle_data_mode()

        assert sent(engine) == "+++"

    def test_errors_propagate(self, device, engine):
        """Test engine errors reach the caller."""
        engine.request.side_effect = DeviceErrorResponse("Device replied with ERROR", "ATZ", "ERROR\r\n")

        with pytest.raises(DeviceErrorResponse):
            device.reset()


class TestGapCommands:
    """Test GAP commands."""

    def test_device_name(self, device, engine):
        """Test name get and set."""
        engine.request.return_value = "Bluefruit LE"

        assert device.get_device_name() == "Bluefruit LE"
        device.set_device_name("Bluefruit 360")
        assert sent(engine) == "AT+GAPDEVNAME=Bluefruit 360"

    def test_set_advertising_data_from_hex(self, device, engine):
        """Test hex text is re-encoded as dash-joined pairs."""
        device.set_advertising_data("020106030209180A")

        assert sent(engine) == "AT+GAPSETADVDATA=02-01-06-03-02-09-18-0A"

    def test_set_advertising_data_from_bytes(self, device, engine):
        """Test bytes payload."""
        device.set_advertising_data(b"\x02\x01\x06")

        assert sent(engine) == "AT+GAPSETADVDATA=02-01-06"

    def test_set_advertising_data_accepts_dashes(self, device, engine):
        """Test dashed hex text is accepted."""
        device.set_advertising_data("02-01-06")

        assert sent(engine) == "AT+GAPSETADVDATA=02-01-06"

    def test_set_advertising_data_bad_hex(self, device, engine):
        """Test malformed hex is rejected before sending."""
        with pytest.raises(MalformedHexError):
            device.set_advertising_data("0201G6")

        engine.request.assert_not_called()

    def test_get_advertising_intervals(self, device, engine):
        """Test interval parsing with a blank field."""
        engine.request.return_value = "20,100,,30"

        assert device.get_advertising_intervals() == [20, 100, None, 30]

    def test_get_advertising_intervals_short_reply(self, device, engine):
        """Test missing trailing fields become None."""
        engine.request.return_value = "20,100"

        assert device.get_advertising_intervals() == [20, 100, None, None]

    def test_set_advertising_intervals(self, device, engine):
        """Test None fields are left empty."""
        device.set_advertising_intervals(20, None, 100, 30)

        assert sent(engine) == "AT+GAPINTERVALS=20,,100,30"


class TestGattCommands:
    """Test GATT commands."""

    def test_add_service(self, device, engine):
        """Test service index is returned."""
        engine.request.return_value = "1"

        assert device.add_gatt_service("0x180F") == "1"
        assert sent(engine) == "AT+GATTADDSERVICE=UUID=0x180F"

    def test_add_characteristic_minimal(self, device, engine):
        """Test characteristic with only UUID and properties."""
        device.add_gatt_characteristic("0x2A19", "0x10")

        assert sent(engine) == "AT+GATTADDCHAR=UUID=0x2A19, PROPERTIES=0x10"

    def test_add_characteristic_full(self, device, engine):
        """Test characteristic with lengths and initial value."""
        device.add_gatt_characteristic("0x2A19", "0x10", min_length=1, max_length=1, value=b"\x64")

        assert sent(engine) == (
            "AT+GATTADDCHAR=UUID=0x2A19, PROPERTIES=0x10, MIN_LEN=1, MAX_LEN=1, VALUE=64"
        )


class TestBeaconCommands:
    """Test beacon commands."""

    def test_ibeacon_defaults(self, device, engine):
        """Test iBeacon command with Apple ID and default RSSI."""
        device.set_ble_beacon(BEACON_UUID, 0x0000, 0x0001)

        assert sent(engine) == (
            "AT+BLEBEACON=0x004C,"
            "E2-C5-6D-B5-DF-FB-48-D2-B0-60-D0-F5-A7-10-96-E0,"
            "0x0000,0x0001,-59"
        )

    def test_ibeacon_custom(self, device, engine):
        """Test custom manufacturer and RSSI."""
        device.set_ble_beacon(bytes(range(16)), 1, 2, manufacturer_id=0x0059, rssi=-54)

        command = sent(engine)
        assert command.startswith("AT+BLEBEACON=0x0059,00-01-02")
        assert command.endswith(",0x0001,0x0002,-54")

    def test_ibeacon_major_out_of_range(self, device, engine):
        """Test major must fit in 16 bits."""
        with pytest.raises(ValueError):
            device.set_ble_beacon(BEACON_UUID, 0x10000, 1)

        engine.request.assert_not_called()

    def test_uri_beacon(self, device, engine):
        """Test URI beacon."""
        device.set_ble_uri_beacon("http://www.adafruit.com")

        assert sent(engine) == "AT+BLEURIBEACON=http://www.adafruit.com"

    def test_eddystone_enable(self, device, engine):
        """Test Eddystone enable get and set."""
        engine.request.return_value = "1"

        assert device.get_eddystone_enable() is True
        device.set_eddystone_enable(False)
        assert sent(engine) == "AT+EDDYSTONEENABLE=0"

    @pytest.mark.parametrize("advertise,command", [
        (False, "AT+EDDYSTONEURL=http://adafru.it"),
        (True, "AT+EDDYSTONEURL=http://adafru.it,1"),
    ])
    def test_eddystone_url(self, device, engine, advertise, command):
        """Test Eddystone URL with optional advertise flag."""
        device.set_eddystone_url("http://adafru.it", advertise=advertise)

        assert sent(engine) == command

    def test_eddystone_config(self, device, engine):
        """Test configuration window."""
        device.set_eddystone_config(300)

        assert sent(engine) == "AT+EDDYSTONECONFIGEN=300"


class TestBleCommands:
    """Test BLE status commands."""

    def test_address_type(self, device, engine):
        """Test address type enum parsing."""
        engine.request.return_value = "1"

        assert device.get_ble_address_type() == BLEAddressType.RANDOM

    def test_address_type_unknown(self, device, engine):
        """Test unknown address type."""
        engine.request.return_value = "7"

        with pytest.raises(UnexpectedReplyError):
            device.get_ble_address_type()

    def test_addresses(self, device, engine):
        """Test own and peer address."""
        engine.request.return_value = "E4:C6:C7:31:95:11"

        assert device.get_ble_address() == "E4:C6:C7:31:95:11"
        assert sent(engine) == "AT+BLEGETADDR"
        device.get_ble_peer_address()
        assert sent(engine) == "AT+BLEGETPEERADDR"

    def test_rssi(self, device, engine):
        """Test negative RSSI parsing."""
        engine.request.return_value = "-46"

        assert device.get_ble_rssi() == -46

    def test_rssi_not_integer(self, device, engine):
        """Test non-numeric reply raises UnexpectedReplyError."""
        engine.request.return_value = "n/a"

        with pytest.raises(UnexpectedReplyError) as exc_info:
            device.get_ble_rssi()

        assert exc_info.value.command == "AT+BLEGETRSSI"
        assert exc_info.value.reply == "n/a"

    def test_power_level(self, device, engine):
        """Test power level get and set."""
        engine.request.return_value = "-4"

        assert device.get_ble_power_level() == -4
        device.set_ble_power_level(-20)
        assert sent(engine) == "AT+BLEPOWERLEVEL=-20"


class TestHardwareCommands:
    """Test hardware commands."""

    def test_adc(self, device, engine):
        """Test ADC reading."""
        engine.request.return_value = "512"

        assert device.get_adc_pin_value(1) == 512
        assert sent(engine) == "AT+HWADC=1"

    def test_gpio_value(self, device, engine):
        """Test GPIO value get and set."""
        engine.request.return_value = "0"

        assert device.get_gpio_pin_value(14) is False
        device.set_gpio_pin_value(14, True)
        assert sent(engine) == "AT+HWGPIO=14,1"

    def test_gpio_mode(self, device, engine):
        """Test GPIO mode get and set."""
        engine.request.return_value = "2"

        assert device.get_gpio_pin_mode(14) == GPIOMode.INPUT_PULLUP
        device.set_gpio_pin_mode(14, GPIOMode.OUTPUT)
        assert sent(engine) == "AT+HWGPIOMODE=14,1"

    def test_die_temperature(self, device, engine):
        """Test float temperature parsing."""
        engine.request.return_value = "32.25"

        assert device.get_die_temperature() == pytest.approx(32.25)

    def test_die_temperature_bad_reply(self, device, engine):
        """Test non-numeric temperature."""
        engine.request.return_value = "hot"

        with pytest.raises(UnexpectedReplyError):
            device.get_die_temperature()

    def test_i2c_scan(self, device, engine):
        """Test I2C addresses are split on commas."""
        engine.request.return_value = "0x23,0x35"

        assert device.scan_i2c() == ["0x23", "0x35"]

    def test_power_supply(self, device, engine):
        """Test supply voltage reading."""
        engine.request.return_value = "3295"

        assert device.get_power_supply_voltage() == 3295
        assert sent(engine) == "AT+HWVBAT"

    def test_random(self, device, engine):
        """Test random value is returned as text."""
        engine.request.return_value = "0x769ED823"

        assert device.get_random_value() == "0x769ED823"

    @pytest.mark.parametrize("reply,expected", [
        ("1", LEDMode.MODE),
        ("MANUAL", LEDMode.MANUAL),
        ("bleuart", LEDMode.BLEUART),
    ])
    def test_get_led_mode(self, device, engine, reply, expected):
        """Test LED mode parsing by number or name."""
        engine.request.return_value = reply

        assert device.get_led_mode() == expected

    def test_get_led_mode_unknown(self, device, engine):
        """Test unknown LED mode."""
        engine.request.return_value = "blinky"

        with pytest.raises(UnexpectedReplyError):
            device.get_led_mode()

    def test_set_led_mode(self, device, engine):
        """Test LED mode by name, with and without manual state."""
        device.set_led_mode(LEDMode.HWUART)
        assert sent(engine) == "AT+HWMODELED=HWUART"

        device.set_led_mode(LEDMode.MANUAL, LEDModeManual.TOGGLE)
        assert sent(engine) == "AT+HWMODELED=MANUAL,TOGGLE"


class TestWithScriptedTransport:
    """Test the catalogue end to end over a scripted transport."""

    def test_device_name_round_trip(self, transport, clock):
        """Test command text on the wire and parsed reply."""
        transport.queue_reply("Bluefruit LE\r\nOK\r\n")
        device = Bluefruit(RequestEngine(transport, clock=clock, sleep=clock.sleep))

        assert device.get_device_name() == "Bluefruit LE"
        assert transport.written == ["AT+GAPDEVNAME"]

    def test_rssi_over_wire(self, transport, clock):
        """Test integer parsing of a real reply shape."""
        transport.queue_reply("-59\r\nOK\r\n")
        device = Bluefruit(RequestEngine(transport, clock=clock, sleep=clock.sleep))

        assert device.get_ble_rssi() == -59
