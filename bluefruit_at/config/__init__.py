"""Configuration management package.

Provides centralized configuration access with defaults, YAML file loading,
and environment variable overrides.
"""

from bluefruit_at.config.config_manager import ConfigManager
from bluefruit_at.config.config_models import (
    Config,
    SerialConfig,
    EngineConfig,
    LoggingConfig,
    LogLevel
)

__all__ = [
    'ConfigManager',
    'Config',
    'SerialConfig',
    'EngineConfig',
    'LoggingConfig',
    'LogLevel',
]
