"""Configuration data models for the Bluefruit AT tool.

Immutable dataclasses with defaults that match the module's factory
settings, so the tool runs without any configuration file.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any


class LogLevel(Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SerialConfig:
    """Serial port configuration.

    Framing (8N1, RTS/CTS) is fixed by the device and not configurable.
    """
    port: Optional[str] = None  # None picks the first available port
    baud_rate: int = 9600
    line_terminator: str = "\n"
    open_settle_ms: int = 30


@dataclass(frozen=True)
class EngineConfig:
    """Request engine configuration."""
    timeout_ms: int = 1000
    poll_interval_ms: int = 1
    echo: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Communication logging configuration."""
    enabled: bool = False
    level: LogLevel = LogLevel.INFO
    log_to_file: bool = False
    log_to_console: bool = True
    log_file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class Config:
    """Complete configuration object with all sections."""
    serial: SerialConfig = field(default_factory=SerialConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary, enums as values."""
        def convert_value(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, dict):
                return {k: convert_value(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_value(item) for item in obj]
            return obj

        return convert_value(asdict(self))
