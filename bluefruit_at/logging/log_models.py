"""Log data models for communication logging.

Defines the immutable LogEntry record used for commands, replies, port
events and errors.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Any, Optional
import json


@dataclass(frozen=True)
class LogEntry:
    """Immutable log entry for communication logging.

    Attributes:
        timestamp: When the event occurred
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        source: Component name (SerialTransport, RequestEngine, ...)
        message: Human-readable message describing the event
        details: Additional structured data (arbitrary dict)
        port: Serial port name (optional)
        command: AT command sent (optional)
        response: Raw reply received (optional)
        status: OK, ERROR or TIMEOUT (optional)
        execution_time: Request duration in seconds (optional)
        error: Error message if applicable (optional)

    Example:
        >>> entry = LogEntry(
        ...     timestamp=datetime(2025, 1, 12, 10, 30, 15, 234000),
        ...     level="INFO",
        ...     source="RequestEngine",
        ...     message="Received response",
        ...     command="AT+BLEGETRSSI",
        ...     status="OK",
        ...     execution_time=0.042
        ... )
        >>> entry.to_string()
        '2025-01-12 10:30:15.234 | INFO    | RequestEngine   | Received response | CMD: AT+BLEGETRSSI | STATUS: OK | TIME: 0.042s'
    """

    timestamp: datetime
    level: str
    source: str
    message: str
    details: Optional[Dict[str, Any]] = None

    port: Optional[str] = None
    command: Optional[str] = None
    response: Optional[str] = None
    status: Optional[str] = None
    execution_time: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary, timestamp in ISO format."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_string(self) -> str:
        """Format as "YYYY-MM-DD HH:MM:SS.mmm | LEVEL | SOURCE | MESSAGE[ | ...]".

        Replies are shown with line breaks escaped so each entry stays on one line.
        """
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        base = f"{timestamp_str} | {self.level:7} | {self.source:15} | {self.message}"

        if self.port:
            base += f" | PORT: {self.port}"
        if self.command:
            base += f" | CMD: {self.command}"
        if self.status:
            base += f" | STATUS: {self.status}"
        if self.execution_time is not None:
            base += f" | TIME: {self.execution_time:.3f}s"
        if self.response:
            base += f" | REPLY: {self.response.encode('unicode_escape').decode('ascii')}"
        if self.error:
            base += f" | ERROR: {self.error}"
        if self.details:
            base += f" | {json.dumps(self.details, default=str)}"

        return base

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Create LogEntry from dictionary; timestamp may be an ISO string."""
        timestamp = data['timestamp']
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            timestamp=timestamp,
            level=data['level'],
            source=data['source'],
            message=data['message'],
            details=data.get('details'),
            port=data.get('port'),
            command=data.get('command'),
            response=data.get('response'),
            status=data.get('status'),
            execution_time=data.get('execution_time'),
            error=data.get('error')
        )

    @classmethod
    def from_json(cls, json_str: str) -> 'LogEntry':
        return cls.from_dict(json.loads(json_str))
