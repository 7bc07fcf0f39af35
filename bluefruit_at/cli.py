"""Bluefruit AT command-line interface.

Opens the serial port, runs one action against the module and prints the
result. Exactly one action runs per invocation; when several options are
given, the first in this order wins: echo, test, info, power, name,
Eddystone URL, iBeacon, device address, peer address, RSSI, reset,
factory reset, raw AT command.
"""

import argparse
import json
import sys
import time
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from bluefruit_at import __version__
from bluefruit_at.config import ConfigManager, Config, LogLevel
from bluefruit_at.core import (
    Bluefruit,
    BluefruitError,
    EngineOptions,
    RequestEngine,
    SerialTransport,
)
from bluefruit_at.logging import CommunicationLogger

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_ERROR_ARGS = 2
EXIT_ERROR_PORT = 3

POWER_LEVELS = {"min": -20, "max": 4}
EDDYSTONE_CONFIG_SECONDS = 300
READ = "read"


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser that exits with EXIT_ERROR_ARGS on bad input."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_ERROR_ARGS, f"{self.prog}: error: {message}\n")


def _power_value(text: str) -> int:
    if text in POWER_LEVELS:
        return POWER_LEVELS[text]
    try:
        return int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected dBm, 'min' or 'max', got {text!r}")


def _ushort(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}")
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"value {value} does not fit in 16 bits")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        prog="bluefruit-at",
        description=f"Bluefruit AT v{__version__} - send AT commands to an Adafruit Bluefruit LE module",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --port COM7 --verbose --at AT+HELP
  %(prog)s --uuid f7826da64fa24e988024bc5b71e08901 --major 11061 --minor 425
  %(prog)s --port auto --power max --name "Bluefruit 360"
  %(prog)s --verbose --info

List of AT commands:
  https://learn.adafruit.com/introducing-adafruit-ble-bluetooth-low-energy-friend?view=all
        """
    )

    connection = parser.add_argument_group("connection")
    connection.add_argument('--port', type=str, metavar='COMx',
                            help="Serial port name or 'auto' (default: first available)")
    connection.add_argument('--baud', type=int,
                            help='Baud rate (default: from configuration, 9600)')
    connection.add_argument('--timeout', type=int, metavar='MS',
                            help='Request timeout in milliseconds (default: 1000)')
    connection.add_argument('--verbose', action='store_true',
                            help='Echo sent and received characters to stdout')
    connection.add_argument('--discover-ports', action='store_true',
                            help='List available serial ports and exit')

    actions = parser.add_argument_group("actions")
    actions.add_argument('--at', type=str, metavar='STRING', help='AT command string')
    actions.add_argument('--uuid', type=str, help='Start iBeacon advertising with this UUID')
    actions.add_argument('--major', type=_ushort, default=0, help='iBeacon major')
    actions.add_argument('--minor', type=_ushort, default=0, help='iBeacon minor')
    actions.add_argument('--name', type=str, help='Set the friendly device name')
    actions.add_argument('--eddystone-url', type=str, metavar='URL',
                         help='Start Eddystone URL advertising')
    actions.add_argument('--device-address', action='store_true', help='Get device BLE address')
    actions.add_argument('--peer-address', action='store_true',
                         help='Get connected peer BLE address')
    actions.add_argument('--rssi', action='store_true', help='Get RSSI in dBm')
    actions.add_argument('--power', nargs='?', const=READ, type=str, metavar='DBM',
                         help="Set power level in dBm, 'min' or 'max'; without value, get it")
    actions.add_argument('--echo', nargs='?', const=READ, choices=['on', 'off', READ],
                         help='Set echo on or off; without value, get the echo flag')
    actions.add_argument('--test', action='store_true', help='Test if device ready')
    actions.add_argument('--info', action='store_true', help='Read device info')
    actions.add_argument('--reset', action='store_true', help='Reset the device')
    actions.add_argument('--factory-reset', action='store_true', help='Reset to factory defaults')

    config = parser.add_argument_group("configuration")
    config.add_argument('--config', type=str, metavar='PATH',
                        help='Configuration file (default: ./bluefruit.yaml or ~/.bluefruit-at/config.yaml)')
    config.add_argument('--show-config', action='store_true',
                        help='Show current configuration with sources and exit')

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument('--log', action='store_true', help='Enable communication logging')
    logging_group.add_argument('--log-file', type=str, metavar='PATH',
                               help='Log file (default: ~/.bluefruit-at/logs/comm_YYYYMMDD_HHMMSS.log)')
    logging_group.add_argument('--log-level', type=str,
                               choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                               help='Log level (default: INFO)')
    logging_group.add_argument('--log-to-console', action='store_true',
                               help='Also write log entries to stderr')

    return parser


def discover_ports() -> int:
    """Print available serial ports."""
    ports = SerialTransport.discover_ports()
    if not ports:
        print("No serial port available!")
        return EXIT_SUCCESS

    print("Available serial ports:")
    for port in ports:
        print(f"  {port.device}  {port.description} [{port.hwid}]")
    return EXIT_SUCCESS


def select_action(args: argparse.Namespace, device: Bluefruit) -> Optional[Callable[[], Optional[object]]]:
    """Pick the single action to run; the callable returns what to print, if anything."""
    if args.echo == READ:
        return lambda: 1 if device.get_echo() else 0
    if args.echo in ('on', 'off'):
        return lambda: device.set_echo(args.echo == 'on')
    if args.test:
        return device.test
    if args.info:
        return device.get_device_info
    if args.power == READ:
        return device.get_ble_power_level
    if args.power is not None:
        dbm = _power_value(args.power)
        return lambda: device.set_ble_power_level(dbm)
    if args.name is not None:
        return lambda: device.set_device_name(args.name)
    if args.eddystone_url is not None:
        def start_eddystone():
            device.set_eddystone_enable(True)
            device.set_eddystone_config(EDDYSTONE_CONFIG_SECONDS)
            device.set_eddystone_url(args.eddystone_url)
        return start_eddystone
    if args.uuid is not None:
        def start_ibeacon():
            device.set_eddystone_enable(False)
            device.set_ble_beacon(args.uuid, args.major, args.minor)
        return start_ibeacon
    if args.device_address:
        return device.get_ble_address
    if args.peer_address:
        return device.get_ble_peer_address
    if args.rssi:
        return device.get_ble_rssi
    if args.reset:
        return device.reset
    if args.factory_reset:
        return device.factory_reset
    if args.at is not None:
        return lambda: device.request(args.at)
    return None


def create_logger(args: argparse.Namespace, config: Config) -> Optional[CommunicationLogger]:
    """Build the communication logger from flags, falling back to configuration."""
    log_config = config.logging
    if not (args.log or log_config.enabled):
        return None

    # --log always writes a file; configuration alone needs log_to_file
    enable_file = args.log or log_config.log_to_file
    log_file_path = None
    if enable_file:
        log_file_path = args.log_file or log_config.log_file_path
        if not log_file_path:
            log_dir = Path.home() / ".bluefruit-at" / "logs"
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file_path = str(log_dir / f"comm_{timestamp}.log")

    level = LogLevel(args.log_level) if args.log_level else log_config.level
    return CommunicationLogger(
        log_level=level,
        enable_file=enable_file,
        enable_console=args.log_to_console or (log_config.enabled and log_config.log_to_console),
        log_file_path=log_file_path,
        max_file_size_mb=log_config.max_file_size_mb,
        backup_count=log_config.backup_count
    )


def resolve_port(requested: Optional[str]) -> Optional[str]:
    """Return the requested port, or the first discovered one for None/'auto'."""
    if requested and requested.lower() != "auto":
        return requested
    ports = SerialTransport.discover_ports()
    return ports[0].device if ports else None


def run(args: argparse.Namespace, config: Config) -> int:
    """Open the port, run the selected action, close the port."""
    port = resolve_port(args.port or config.serial.port)
    if port is None:
        print("No serial port available!", file=sys.stderr)
        return EXIT_ERROR_PORT

    options = EngineOptions.from_config(config.engine, echo_sink=sys.stdout)
    if args.timeout is not None:
        options = replace(options, timeout_ms=args.timeout)
    if args.verbose:
        options = replace(options, echo=True)
    echo = options.echo

    logger = None
    transport = None
    try:
        logger = create_logger(args, config)
        transport = SerialTransport(
            port,
            baud_rate=args.baud or config.serial.baud_rate,
            line_terminator=config.serial.line_terminator,
            logger=logger
        )
        transport.open()
        time.sleep(config.serial.open_settle_ms / 1000.0)

        device = Bluefruit(RequestEngine(transport, options, logger=logger))
        action = select_action(args, device)
        if action is None:
            build_parser().print_help()
            return EXIT_SUCCESS

        result = action()
        if result is not None and not echo:
            print(result)
        return EXIT_SUCCESS

    except BluefruitError as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_ERROR
    finally:
        if transport is not None:
            transport.close()
        if logger:
            logger.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``bluefruit-at`` console script."""
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        parser.print_help()
        return EXIT_ERROR

    args = parser.parse_args(argv)

    if args.power not in (None, READ):
        try:
            _power_value(args.power)
        except argparse.ArgumentTypeError as e:
            print(f"Error: --power: {e}", file=sys.stderr)
            return EXIT_ERROR_ARGS

    try:
        manager = ConfigManager.initialize(Path(args.config) if args.config else None)
    except BluefruitError as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR_ARGS

    if args.show_config:
        print(json.dumps(manager.show_config(), indent=2))
        return EXIT_SUCCESS

    if args.discover_ports:
        return discover_ports()

    return run(args, manager.get_config())


if __name__ == "__main__":
    sys.exit(main())
