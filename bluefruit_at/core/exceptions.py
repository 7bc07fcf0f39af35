"""Exception hierarchy for the Bluefruit AT command engine.

Every error raised by this package derives from BluefruitError, so callers
can catch all tool-specific failures with a single except clause while still
telling transport faults, request failures and bad input apart.
"""

from typing import List, Optional


class BluefruitError(Exception):
    """Base exception for all Bluefruit AT errors."""
    pass


class SerialPortError(BluefruitError):
    """Serial port communication error.

    Raised when serial port operations fail (open, read, write). The
    request engine never wraps these; they reach the caller unchanged.

    Attributes:
        port: Serial port identifier (e.g., '/dev/ttyUSB0', 'COM3')
        os_error: Original exception from pyserial or OS (if available)
    """

    def __init__(self, message: str, port: str, os_error: Optional[Exception] = None):
        super().__init__(message)
        self.port = port
        self.os_error = os_error

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.os_error:
            return f"{base_msg} (port: {self.port}, cause: {self.os_error})"
        return f"{base_msg} (port: {self.port})"


class SerialPortBusyError(SerialPortError):
    """Port is already in use by another process."""
    pass


class ConnectionTimeoutError(SerialPortError):
    """Opening the port did not complete in time."""
    pass


class RequestError(BluefruitError):
    """A single command/response exchange failed.

    Attributes:
        command: AT command string that was sent
    """

    def __init__(self, message: str, command: str):
        super().__init__(message)
        self.command = command

    def __str__(self) -> str:
        return f"{super().__str__()} (command: {self.command})"


class RequestTimeoutError(RequestError):
    """No OK/ERROR terminator arrived before the request deadline.

    Attributes:
        command: AT command string that was sent
        timeout_ms: Configured timeout window in milliseconds
        raw_response: Text accumulated before the deadline expired
    """

    def __init__(self, message: str, command: str, timeout_ms: int,
                 raw_response: str = ""):
        super().__init__(message, command)
        self.timeout_ms = timeout_ms
        self.raw_response = raw_response

    def __str__(self) -> str:
        return f"{super().__str__()} after {self.timeout_ms} ms"


class DeviceErrorResponse(RequestError):
    """The device terminated its reply with ERROR.

    Attributes:
        command: AT command string the device rejected
        raw_response: Full reply text including the ERROR token
    """

    def __init__(self, message: str, command: str, raw_response: str):
        super().__init__(message, command)
        self.raw_response = raw_response


class MalformedHexError(BluefruitError, ValueError):
    """Hex text could not be decoded into bytes.

    Raised for odd-length input and for characters outside [0-9A-Fa-f].

    Attributes:
        text: The offending hex string
    """

    def __init__(self, message: str, text: str):
        super().__init__(message)
        self.text = text

    def __str__(self) -> str:
        return f"{super().__str__()} (input: {self.text!r})"


class UnexpectedReplyError(BluefruitError):
    """A reply body could not be converted to the expected value.

    Attributes:
        command: AT command string that was sent
        reply: Reply body returned by the engine
    """

    def __init__(self, message: str, command: str, reply: str):
        super().__init__(message)
        self.command = command
        self.reply = reply

    def __str__(self) -> str:
        return f"{super().__str__()} (command: {self.command}, reply: {self.reply!r})"


class ConfigurationError(BluefruitError):
    """Configuration failed schema or semantic validation.

    Attributes:
        errors: List of validation error messages
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        base_msg = super().__str__()
        if not self.errors:
            return base_msg
        return base_msg + "\n" + "\n".join(f"  - {error}" for error in self.errors)
