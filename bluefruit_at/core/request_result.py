"""Tagged outcome of a single AT request.

RequestResult is what RequestEngine.execute() returns: a frozen record that
carries either the reply payload (status OK) or the failure kind (ERROR or
TIMEOUT) without raising, so call sites can branch on ``status`` instead of
catching exceptions. ``unwrap()`` converts it back into the raising style.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time

from bluefruit_at.core.exceptions import DeviceErrorResponse, RequestTimeoutError


class ResponseStatus(Enum):
    """Terminal status of a request.

    - OK: device replied with the OK terminator
    - ERROR: device replied with the ERROR terminator
    - TIMEOUT: no terminator before the deadline
    """
    OK = "OK"
    ERROR = "ERROR"
    TIMEOUT = "TIMEOUT"


@dataclass(frozen=True)
class RequestResult:
    """Immutable result of one command/response exchange.

    Attributes:
        command: AT command string sent (e.g., "AT+GAPDEVNAME")
        status: OK, ERROR or TIMEOUT
        raw_response: Everything read during the request, terminator included
        payload: Reply body with the OK terminator stripped (OK only)
        elapsed: Seconds from the start of the write to termination
        timeout_ms: Timeout window that applied to this request
        timestamp: Unix timestamp when the result was created
    """

    command: str
    status: ResponseStatus
    raw_response: str
    elapsed: float
    timeout_ms: int
    payload: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def is_successful(self) -> bool:
        """Check if the device answered OK."""
        return self.status == ResponseStatus.OK

    def unwrap(self) -> str:
        """Return the payload, or raise the failure this result describes.

        Returns:
            Reply body (may be empty)

        Raises:
            DeviceErrorResponse: status is ERROR
            RequestTimeoutError: status is TIMEOUT

        Example:
            >>> result = engine.execute("AT+GAPDEVNAME")
            >>> result.unwrap()
            'Bluefruit LE'
        """
        if self.status == ResponseStatus.ERROR:
            raise DeviceErrorResponse(
                "Device replied with ERROR",
                self.command,
                self.raw_response
            )
        if self.status == ResponseStatus.TIMEOUT:
            raise RequestTimeoutError(
                "Timeout expired while waiting for response",
                self.command,
                self.timeout_ms,
                self.raw_response
            )
        return self.payload if self.payload is not None else ""

    def __str__(self) -> str:
        if self.status == ResponseStatus.OK:
            return f"[{self.status.value}] {self.command} -> {len(self.payload or '')} chars ({self.elapsed:.3f}s)"
        elif self.status == ResponseStatus.ERROR:
            return f"[{self.status.value}] {self.command} ({self.elapsed:.3f}s)"
        else:  # TIMEOUT
            return f"[{self.status.value}] {self.command} (after {self.timeout_ms} ms)"
