"""Single-shot AT request/response engine.

RequestEngine sends one command, then polls the transport until the reply
terminator arrives or the deadline passes:

1. Sending: mirror the command to the echo sink (if enabled), write it.
2. Accumulating: drain available bytes one at a time into a per-request
   buffer, feeding each character to a TerminatorScanner. When a drain pass
   ends without a terminator, compare the clock with the deadline and sleep
   for the poll interval.
3. Terminated: classify OK or ERROR from the end of the buffer and strip
   the OK terminator from the payload.
4. TimedOut: no terminator before the deadline.

The engine is synchronous and not reentrant. Callers serialise requests on
a given transport; there is no internal locking, queueing or retrying.
"""

from dataclasses import dataclass
from typing import Callable, Optional, TextIO, TYPE_CHECKING
import time

from bluefruit_at.core.request_result import RequestResult, ResponseStatus
from bluefruit_at.core.terminator import TerminatorScanner, extract_status, strip_ok
from bluefruit_at.core.transport import ByteTransport

if TYPE_CHECKING:
    from bluefruit_at.config.config_models import EngineConfig
    from bluefruit_at.logging.communication_logger import CommunicationLogger


@dataclass(frozen=True)
class EngineOptions:
    """Per-engine settings, fixed for the engine's lifetime.

    Attributes:
        timeout_ms: Window for each request, measured from the start of the write
        poll_interval_ms: Sleep between polls when no bytes are available
        echo: Mirror the outgoing command and every received character
        echo_sink: Text stream receiving the echo (ignored unless echo is set)
    """
    timeout_ms: int = 1000
    poll_interval_ms: float = 1.0
    echo: bool = False
    echo_sink: Optional[TextIO] = None

    @classmethod
    def from_config(cls, config: 'EngineConfig',
                    echo_sink: Optional[TextIO] = None) -> 'EngineOptions':
        """Build options from the engine section of the loaded configuration."""
        return cls(
            timeout_ms=config.timeout_ms,
            poll_interval_ms=config.poll_interval_ms,
            echo=config.echo,
            echo_sink=echo_sink
        )


class RequestEngine:
    """Executes AT commands against a ByteTransport.

    Args:
        transport: Opened transport; the engine never opens or closes it
        options: Timeout, poll interval and echo settings
        logger: Optional CommunicationLogger for commands and outcomes
        clock: Monotonic time source in seconds (injectable for tests)
        sleep: Sleep function taking seconds (injectable for tests)

    Example:
        >>> transport = SerialTransport('/dev/ttyUSB0')
        >>> transport.open()
        >>> engine = RequestEngine(transport, EngineOptions(timeout_ms=2000))
        >>> engine.request('AT+GAPDEVNAME')
        'Adafruit Bluefruit LE'
    """

    def __init__(self,
                 transport: ByteTransport,
                 options: Optional[EngineOptions] = None,
                 logger: Optional['CommunicationLogger'] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.transport = transport
        self.options = options or EngineOptions()
        self.logger = logger
        self._clock = clock
        self._sleep = sleep

    def request(self, command: str) -> str:
        """Send a command and return the reply body.

        Args:
            command: AT command without line terminator (e.g., "AT+BLEGETRSSI")

        Returns:
            Reply text without the trailing OK and its adjoining line breaks

        Raises:
            RequestTimeoutError: No terminator within the configured window
            DeviceErrorResponse: Device replied with ERROR
            SerialPortError: Transport fault (propagated unchanged)
        """
        return self.execute(command).unwrap()

    def test(self) -> None:
        """Send ``AT`` as a liveness probe; raises like request() on failure."""
        self.request("AT")

    def execute(self, command: str) -> RequestResult:
        """Send a command and return a tagged result instead of raising.

        Timeout and ERROR replies are reported through ``status``. Transport
        faults still raise, since no result can be built for them.
        """
        timeout_ms = self.options.timeout_ms
        start = self._clock()
        deadline = start + timeout_ms / 1000.0

        self._echo_line(command)
        if self.logger:
            self.logger.log_command(port=self._port_name(), command=command)

        self.transport.write_line(command)

        buffer = []
        scanner = TerminatorScanner()
        terminated = False
        while not terminated:
            while self.transport.bytes_available() > 0:
                char = chr(self.transport.read_byte())
                self._echo_char(char)
                buffer.append(char)
                if scanner.feed(char):
                    terminated = True
                    break
            if terminated:
                break
            if self._clock() > deadline:
                break
            self._sleep(self.options.poll_interval_ms / 1000.0)

        raw = "".join(buffer)
        elapsed = self._clock() - start

        if not terminated:
            result = RequestResult(
                command=command,
                status=ResponseStatus.TIMEOUT,
                raw_response=raw,
                elapsed=elapsed,
                timeout_ms=timeout_ms
            )
        elif extract_status(raw) == "ERROR":
            result = RequestResult(
                command=command,
                status=ResponseStatus.ERROR,
                raw_response=raw,
                elapsed=elapsed,
                timeout_ms=timeout_ms
            )
        else:
            result = RequestResult(
                command=command,
                status=ResponseStatus.OK,
                raw_response=raw,
                elapsed=elapsed,
                timeout_ms=timeout_ms,
                payload=strip_ok(raw)
            )

        if self.logger:
            self.logger.log_response(
                port=self._port_name(),
                response=raw,
                status=result.status.value,
                execution_time=elapsed,
                command=command
            )
        return result

    def _echo_line(self, text: str) -> None:
        sink = self.options.echo_sink
        if self.options.echo and sink is not None:
            sink.write(text + "\n")
            sink.flush()

    def _echo_char(self, char: str) -> None:
        sink = self.options.echo_sink
        if self.options.echo and sink is not None:
            sink.write(char)
            sink.flush()

    def _port_name(self) -> str:
        return getattr(self.transport, "port", type(self.transport).__name__)

    def __repr__(self) -> str:
        return (f"RequestEngine(transport={self.transport!r}, "
                f"timeout={self.options.timeout_ms}ms, echo={self.options.echo})")
