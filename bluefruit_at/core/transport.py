"""Abstract byte transport consumed by the request engine.

The engine needs only three things from the channel: write a command line,
ask how many unread bytes are buffered, and read one byte. Anything that
provides these (a pyserial port, a socket bridge, an in-memory script for
tests) can drive a RequestEngine.
"""

from abc import ABC, abstractmethod


class ByteTransport(ABC):
    """Duplex byte channel, opened and owned by the caller.

    Implementations append their own line terminator in write_line(); the
    engine never adds one. Faults are raised as the implementation's own
    exceptions and are not translated by the engine.
    """

    @abstractmethod
    def write_line(self, text: str) -> int:
        """Write text followed by the line terminator.

        Returns:
            Number of bytes written
        """

    @abstractmethod
    def bytes_available(self) -> int:
        """Return the number of received bytes waiting to be read, without blocking."""

    @abstractmethod
    def read_byte(self) -> int:
        """Read exactly one byte and return it as an int in 0..255."""
