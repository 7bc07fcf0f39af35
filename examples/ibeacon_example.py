"""iBeacon example for a Bluefruit LE module on a serial port.

Shows the usual session:
SerialTransport -> RequestEngine -> Bluefruit -> AT+BLEBEACON

Usage:
    python examples/ibeacon_example.py /dev/ttyUSB0
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bluefruit_at import (
    Bluefruit,
    BluefruitError,
    EngineOptions,
    RequestEngine,
    SerialTransport,
)

BEACON_UUID = "E2C56DB5DFFB48D2B060D0F5A71096E0"


def run_beacon(port: str) -> int:
    print("Bluefruit iBeacon Example")
    print("=" * 70)

    transport = SerialTransport(port)
    try:
        transport.open()
        engine = RequestEngine(transport, EngineOptions(timeout_ms=2000))
        device = Bluefruit(engine)

        device.test()
        print(f"  Device info:   {device.get_device_info()!r}")
        print(f"  Device name:   {device.get_device_name()}")
        print(f"  Address:       {device.get_ble_address()}")
        print(f"  Power level:   {device.get_ble_power_level()} dBm")

        # Eddystone and iBeacon share the advertising slot
        device.set_eddystone_enable(False)
        device.set_ble_beacon(BEACON_UUID, major=0x0001, minor=0x0002)
        device.reset()
        print(f"\n  Advertising iBeacon {BEACON_UUID} (major 1, minor 2)")

    except BluefruitError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    finally:
        transport.close()

    print("=" * 70)
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(run_beacon(sys.argv[1]))
