"""pyserial transport for the Bluefruit LE UART/USB Friend.

The module talks 8N1 with RTS/CTS hardware flow control, which is fixed by
the device; only the port, baud rate and line terminator vary.
"""

from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING
import threading
import time

import serial
from serial.tools import list_ports

from bluefruit_at.core.exceptions import (
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError,
)
from bluefruit_at.core.transport import ByteTransport

# Avoid circular import for type hints
if TYPE_CHECKING:
    from bluefruit_at.logging.communication_logger import CommunicationLogger


@dataclass
class PortInfo:
    """Serial port information from discovery.

    Attributes:
        device: Port device path (e.g., '/dev/ttyUSB0', 'COM3')
        description: Human-readable port description
        hwid: Hardware identifier (USB VID:PID, etc.)
    """
    device: str
    description: str
    hwid: str


class SerialTransport(ByteTransport):
    """ByteTransport over a pyserial port.

    Wraps pyserial exceptions in SerialPortError and its subclasses. A lock
    guards the port object so open/close from another thread cannot race an
    in-flight read.

    Example:
        >>> transport = SerialTransport('/dev/ttyUSB0')
        >>> transport.open()
        >>> transport.write_line('AT')
        >>> transport.close()
    """

    FRAMING = {
        "bytesize": serial.EIGHTBITS,
        "parity": serial.PARITY_NONE,
        "stopbits": serial.STOPBITS_ONE,
        "rtscts": True,
    }

    def __init__(self,
                 port: str,
                 baud_rate: int = 9600,
                 timeout: float = 1.0,
                 line_terminator: str = "\n",
                 logger: Optional['CommunicationLogger'] = None,
                 **kwargs):
        """Initialize transport with port configuration.

        Args:
            port: Serial port device path
            baud_rate: Baud rate (default 9600, the module's factory setting)
            timeout: pyserial read timeout in seconds (default 1.0)
            line_terminator: Appended to every written line (default "\\n")
            logger: Optional CommunicationLogger for port events
            **kwargs: Additional arguments passed to serial.Serial
        """
        self.port = port
        self.baud_rate = baud_rate
        self.timeout = timeout
        self.line_terminator = line_terminator
        self.logger = logger
        self.kwargs = kwargs
        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()
        self._open_time: Optional[float] = None

    def open(self) -> None:
        """Open the serial port with the module's fixed framing.

        Raises:
            SerialPortError: Port doesn't exist or permission denied
            SerialPortBusyError: Port already in use
            ConnectionTimeoutError: Open timeout exceeded
        """
        with self._lock:
            if self._serial is not None and self._serial.is_open:
                return

            settings = dict(self.FRAMING)
            settings.update(self.kwargs)
            try:
                self._serial = serial.Serial(
                    port=self.port,
                    baudrate=self.baud_rate,
                    timeout=self.timeout,
                    **settings
                )
                self._open_time = time.time()

                if self.logger:
                    self.logger.log_port_event(
                        event="Port opened",
                        port=self.port,
                        details={"baud_rate": self.baud_rate, "timeout": self.timeout},
                        level="INFO"
                    )

            except serial.SerialException as e:
                if self.logger:
                    self.logger.log_error(
                        source="SerialTransport",
                        error=f"Failed to open port: {e}",
                        details={"port": self.port, "error_type": type(e).__name__}
                    )

                error_msg = str(e).lower()
                if 'permission denied' in error_msg or 'access denied' in error_msg:
                    raise SerialPortError(
                        f"Permission denied accessing port {self.port}", self.port, e
                    ) from e
                elif 'busy' in error_msg or 'in use' in error_msg:
                    raise SerialPortBusyError(
                        f"Port {self.port} is already in use", self.port, e
                    ) from e
                elif 'timeout' in error_msg:
                    raise ConnectionTimeoutError(
                        f"Timeout opening port {self.port}", self.port, e
                    ) from e
                raise SerialPortError(
                    f"Failed to open port {self.port}: {e}", self.port, e
                ) from e

    def close(self) -> None:
        """Close serial port and release resources.

        Safe to call multiple times; does nothing if port is already closed.
        """
        with self._lock:
            if self._serial is None or not self._serial.is_open:
                return
            try:
                self._serial.close()

                if self.logger:
                    details = None
                    if self._open_time:
                        details = {"session_duration_seconds": time.time() - self._open_time}
                    self.logger.log_port_event(
                        event="Port closed",
                        port=self.port,
                        details=details,
                        level="INFO"
                    )
            except (serial.SerialException, OSError) as e:
                if self.logger:
                    self.logger.log_error(
                        source="SerialTransport",
                        error=f"Error closing port: {e}",
                        details={"port": self.port}
                    )
            finally:
                self._open_time = None

    def write_line(self, text: str) -> int:
        """Write text plus the line terminator and flush.

        Raises:
            SerialPortError: Port not open or write failed
        """
        with self._lock:
            port = self._require_open("write to")
            try:
                bytes_written = port.write(f"{text}{self.line_terminator}".encode('ascii'))
                port.flush()
                return bytes_written
            except UnicodeEncodeError as e:
                raise SerialPortError(
                    f"Command is not ASCII: {text!r}", self.port, e
                ) from e
            except serial.SerialException as e:
                raise SerialPortError(
                    f"Failed to write to port {self.port}: {e}", self.port, e
                ) from e

    def bytes_available(self) -> int:
        """Return the number of bytes in the receive buffer.

        Raises:
            SerialPortError: Port not open or status query failed
        """
        with self._lock:
            port = self._require_open("read from")
            try:
                return port.in_waiting
            except (serial.SerialException, OSError) as e:
                raise SerialPortError(
                    f"Failed to query port {self.port}: {e}", self.port, e
                ) from e

    def read_byte(self) -> int:
        """Read a single byte.

        Raises:
            SerialPortError: Port not open, read failed or returned nothing
        """
        with self._lock:
            port = self._require_open("read from")
            try:
                data = port.read(1)
            except serial.SerialException as e:
                raise SerialPortError(
                    f"Failed to read from port {self.port}: {e}", self.port, e
                ) from e
            if not data:
                raise SerialPortError(
                    f"Read from port {self.port} returned no data", self.port
                )
            return data[0]

    def is_connected(self) -> bool:
        """Check if port is currently open."""
        with self._lock:
            return self._serial is not None and self._serial.is_open

    def flush_buffers(self) -> None:
        """Discard pending input and output.

        Raises:
            SerialPortError: Port not open or flush failed
        """
        with self._lock:
            port = self._require_open("flush buffers on")
            try:
                port.reset_input_buffer()
                port.reset_output_buffer()
            except serial.SerialException as e:
                raise SerialPortError(
                    f"Failed to flush buffers on port {self.port}: {e}", self.port, e
                ) from e

    def _require_open(self, action: str) -> serial.Serial:
        # Caller must hold self._lock
        if self._serial is None or not self._serial.is_open:
            raise SerialPortError(f"Cannot {action} closed port", self.port)
        return self._serial

    @staticmethod
    def discover_ports() -> List[PortInfo]:
        """Enumerate available serial ports, sorted by device name.

        Example:
            >>> for port in SerialTransport.discover_ports():
            ...     print(f"{port.device}: {port.description}")
            /dev/ttyUSB0: CP2104 USB to UART Bridge Controller
        """
        ports = []
        for port_info in list_ports.comports():
            ports.append(PortInfo(
                device=port_info.device,
                description=port_info.description or "Unknown",
                hwid=port_info.hwid or "Unknown"
            ))
        return sorted(ports, key=lambda info: info.device)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        status = "open" if self.is_connected() else "closed"
        return f"SerialTransport(port='{self.port}', baud={self.baud_rate}, status={status})"
