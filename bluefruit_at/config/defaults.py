"""Default configuration values for zero-config operation."""

from bluefruit_at.config.config_models import (
    Config,
    SerialConfig,
    EngineConfig,
    LoggingConfig,
    LogLevel
)


def get_default_config() -> Config:
    """Get default configuration.

    Default Values:
        - Serial: first available port, 9600 baud (module factory rate),
          "\\n" line terminator, 30 ms settle time after open
        - Engine: 1 s timeout, 1 ms poll interval, echo off
        - Logging: disabled, INFO level, console output when enabled
    """
    return Config(
        serial=SerialConfig(
            port=None,
            baud_rate=9600,
            line_terminator="\n",
            open_settle_ms=30
        ),
        engine=EngineConfig(
            timeout_ms=1000,
            poll_interval_ms=1,
            echo=False
        ),
        logging=LoggingConfig(
            enabled=False,
            level=LogLevel.INFO,
            log_to_file=False,
            log_to_console=True,
            log_file_path=None,  # Auto-generated: ~/.bluefruit-at/logs/comm_{timestamp}.log
            max_file_size_mb=10,
            backup_count=5
        )
    )
