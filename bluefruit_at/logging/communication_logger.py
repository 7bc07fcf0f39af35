"""Communication logger for AT request logging.

CommunicationLogger fans LogEntry records out to a rotated log file, the
console (stderr) and an in-memory ring buffer, filtering by level. The
transport and the request engine call its convenience methods.
"""

from collections import deque
from datetime import datetime
from threading import Lock
from typing import Optional, List, Dict, Any, Union
import sys

from bluefruit_at.config.config_models import LogLevel
from bluefruit_at.logging.file_handler import FileHandler
from bluefruit_at.logging.log_models import LogEntry


class CommunicationLogger:
    """Central coordinator for communication logging.

    Attributes:
        log_level: Current log level name (DEBUG, INFO, WARNING, ERROR)
        enable_file: Whether file logging is enabled
        enable_console: Whether console logging is enabled
        log_file_path: Path to log file (if file logging enabled)

    Example:
        >>> logger = CommunicationLogger(
        ...     log_level=LogLevel.INFO,
        ...     enable_file=True,
        ...     enable_console=False,
        ...     log_file_path="~/.bluefruit-at/logs/comm.log"
        ... )
        >>> logger.log_command(port="COM7", command="AT+GAPDEVNAME")
        >>> logger.log_response(port="COM7", response="Bluefruit\\r\\nOK\\r\\n",
        ...                     status="OK", execution_time=0.031)
        >>> logger.close()
    """

    _LEVEL_PRIORITY = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3
    }

    # Engine status -> entry level
    _STATUS_LEVEL = {
        "OK": "INFO",
        "TIMEOUT": "WARNING",
        "ERROR": "ERROR"
    }

    def __init__(
        self,
        log_level: Union[LogLevel, str] = LogLevel.INFO,
        enable_file: bool = False,
        enable_console: bool = True,
        log_file_path: Optional[str] = None,
        max_file_size_mb: float = 10,
        backup_count: int = 5,
        buffer_size: int = 1000
    ):
        """Initialize output destinations and level.

        Raises:
            ValueError: enable_file=True but log_file_path is None
        """
        self.log_level = log_level.value if isinstance(log_level, LogLevel) else log_level
        self.enable_file = enable_file
        self.enable_console = enable_console
        self.log_file_path = log_file_path

        self._lock = Lock()
        self._buffer: deque = deque(maxlen=buffer_size)

        self._file_handler: Optional[FileHandler] = None
        if self.enable_file:
            if not log_file_path:
                raise ValueError("log_file_path required when enable_file=True")
            try:
                self._file_handler = FileHandler(
                    log_file_path=log_file_path,
                    max_size_mb=max_file_size_mb,
                    backup_count=backup_count
                )
            except OSError as e:
                print(f"WARNING: Failed to initialize file logging: {e}", file=sys.stderr)

    def log(self, entry: LogEntry) -> None:
        """Record an entry in every enabled destination, if its level passes."""
        if not self._should_log(entry.level):
            return

        with self._lock:
            self._buffer.append(entry)

            if self._file_handler:
                self._file_handler.write(entry)

            if self.enable_console:
                print(entry.to_string(), file=sys.stderr)

    def _should_log(self, entry_level: str) -> bool:
        entry_priority = self._LEVEL_PRIORITY.get(entry_level, 0)
        current_priority = self._LEVEL_PRIORITY.get(self.log_level, 0)
        return entry_priority >= current_priority

    def log_command(self, port: str, command: str) -> None:
        """Log an AT command about to be written."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="INFO",
            source="RequestEngine",
            message="Sending command",
            port=port,
            command=command
        ))

    def log_response(
        self,
        port: str,
        response: str,
        status: str,
        execution_time: float,
        command: Optional[str] = None
    ) -> None:
        """Log the outcome of a request.

        Args:
            port: Serial port name
            response: Raw reply text, terminator included
            status: OK, ERROR or TIMEOUT
            execution_time: Request duration in seconds
            command: Original command (optional)
        """
        self.log(LogEntry(
            timestamp=datetime.now(),
            level=self._STATUS_LEVEL.get(status, "ERROR"),
            source="RequestEngine",
            message="Received response" if status != "TIMEOUT" else "Request timed out",
            port=port,
            command=command,
            response=response,
            status=status,
            execution_time=execution_time
        ))

    def log_port_event(
        self,
        event: str,
        port: str,
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ) -> None:
        """Log a serial port event such as "Port opened"."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level=level,
            source="SerialTransport",
            message=event,
            port=port,
            details=details
        ))

    def log_error(
        self,
        source: str,
        error: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log an error raised by ``source``."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="ERROR",
            source=source,
            message="Error occurred",
            error=error,
            details=details
        ))

    def set_level(self, level: Union[LogLevel, str]) -> None:
        self.log_level = level.value if isinstance(level, LogLevel) else level

    def get_entries(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Entries from the in-memory buffer, oldest first; ``limit`` keeps the newest."""
        with self._lock:
            entries = list(self._buffer)
        if limit:
            entries = entries[-limit:]
        return entries

    def clear_buffer(self) -> None:
        """Clear the in-memory buffer; file logs are untouched."""
        with self._lock:
            self._buffer.clear()

    def flush(self) -> None:
        if self._file_handler:
            self._file_handler.flush()

    def close(self) -> None:
        """Close the file handler. Call on shutdown so everything reaches disk."""
        if self._file_handler:
            self._file_handler.close()
            self._file_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
