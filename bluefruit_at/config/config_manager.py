"""Configuration manager for the Bluefruit AT tool.

Provides singleton access to application configuration with support for
defaults, file loading, and environment variable overrides.
"""

from copy import deepcopy
from pathlib import Path
from typing import Optional, Dict, Any, List
import logging
import os

import yaml

from bluefruit_at.config.config_models import (
    Config,
    SerialConfig,
    EngineConfig,
    LoggingConfig,
    LogLevel
)
from bluefruit_at.config.config_schema import ConfigSchema
from bluefruit_at.config.defaults import get_default_config
from bluefruit_at.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "BLUEFRUIT_AT_"


class ConfigManager:
    """Singleton configuration manager.

    Layered loading:
    1. Load defaults
    2. Load from file (if exists)
    3. Apply environment variable overrides
    4. Validate configuration against JSON schema
    5. Build the frozen Config object
    """

    _instance: Optional['ConfigManager'] = None

    def __init__(self):
        """Private constructor. Use instance() or initialize() class methods."""
        if ConfigManager._instance is not None:
            raise RuntimeError("Use ConfigManager.instance() instead of constructor")
        self._config: Optional[Config] = None
        self._config_source: Dict[str, str] = {}
        self._config_path: Optional[Path] = None

    @classmethod
    def instance(cls) -> 'ConfigManager':
        """Get singleton instance of ConfigManager.

        Raises:
            RuntimeError: If not yet initialized.
        """
        if cls._instance is None:
            raise RuntimeError("ConfigManager not initialized. Call initialize() first.")
        return cls._instance

    @classmethod
    def initialize(cls, config_path: Optional[Path] = None) -> 'ConfigManager':
        """Load configuration and install it as the singleton.

        Args:
            config_path: Optional path to a YAML file. If None, searches the
                default paths. An explicit path that does not exist is an error.

        Returns:
            ConfigManager: Initialized singleton instance.

        Raises:
            ConfigurationError: File unreadable, not a mapping, or invalid
        """
        manager = cls.__new__(cls)
        manager._config = None
        manager._config_source = {}
        manager._config_path = None

        config_dict = get_default_config().to_dict()
        manager._mark_source(config_dict, "default")

        if config_path is None:
            config_path = cls._search_config_paths()
        elif not Path(config_path).exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        if config_path is not None:
            file_config = cls._load_from_file(Path(config_path))
            config_dict = cls._merge_configs(config_dict, file_config)
            manager._mark_source(file_config, "file")
            manager._config_path = Path(config_path)
            logger.debug("Loaded configuration from %s", config_path)

        env_overrides = cls._apply_env_overrides()
        if env_overrides:
            config_dict = cls._merge_configs(config_dict, env_overrides)
            manager._mark_source(env_overrides, "env")

        is_valid, validation_errors = ConfigSchema.validate_config(config_dict)
        if not is_valid:
            raise ConfigurationError("Configuration validation failed", validation_errors)

        manager._config = cls._dict_to_config(config_dict)
        cls._instance = manager
        return manager

    @staticmethod
    def _search_config_paths() -> Optional[Path]:
        """Search for a configuration file in standard locations.

        Search order:
            1. ./bluefruit.yaml (current directory)
            2. ~/.bluefruit-at/config.yaml (user home directory)
        """
        search_paths = [
            Path("./bluefruit.yaml"),
            Path.home() / ".bluefruit-at" / "config.yaml"
        ]

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        return None

    @staticmethod
    def _load_from_file(path: Path) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: File unreadable, bad YAML, or not a mapping
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration from {path}: {e}") from e

        if config_dict is None:
            return {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Configuration in {path} must be a mapping")
        return config_dict

    @staticmethod
    def _apply_env_overrides() -> Dict[str, Any]:
        """Collect environment variable overrides.

        Environment variables use format: BLUEFRUIT_AT_SECTION_KEY
        Examples:
            BLUEFRUIT_AT_SERIAL_PORT=/dev/ttyUSB0
            BLUEFRUIT_AT_ENGINE_TIMEOUT_MS=2500
            BLUEFRUIT_AT_ENGINE_ECHO=true
        """
        overrides: Dict[str, Dict[str, Any]] = {}

        for env_name, env_value in os.environ.items():
            if not env_name.startswith(ENV_PREFIX):
                continue

            # BLUEFRUIT_AT_ENGINE_TIMEOUT_MS -> ["engine", "timeout_ms"]
            parts = env_name[len(ENV_PREFIX):].lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, key = parts
            overrides.setdefault(section, {})[key] = ConfigManager._parse_env_value(env_value)

        return overrides

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse environment variable value to bool, int or str."""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        if value.lower() in ('false', 'no', 'off'):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        return value

    @staticmethod
    def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries (override takes precedence)."""
        merged = deepcopy(base)

        for section, section_values in override.items():
            if isinstance(section_values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(section_values)
            else:
                merged[section] = section_values

        return merged

    def _mark_source(self, config: Dict[str, Any], source: str) -> None:
        """Record where each section.key value came from."""
        for section, section_values in config.items():
            if isinstance(section_values, dict):
                for key in section_values.keys():
                    self._config_source[f"{section}.{key}"] = source

    @staticmethod
    def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
        """Convert a validated configuration dictionary to a Config object."""
        serial_dict = config_dict.get('serial', {})
        serial = SerialConfig(
            port=serial_dict.get('port'),
            baud_rate=serial_dict.get('baud_rate', 9600),
            line_terminator=serial_dict.get('line_terminator', "\n"),
            open_settle_ms=serial_dict.get('open_settle_ms', 30)
        )

        engine_dict = config_dict.get('engine', {})
        engine = EngineConfig(
            timeout_ms=engine_dict.get('timeout_ms', 1000),
            poll_interval_ms=engine_dict.get('poll_interval_ms', 1),
            echo=engine_dict.get('echo', False)
        )

        log_dict = config_dict.get('logging', {})
        logging_config = LoggingConfig(
            enabled=log_dict.get('enabled', False),
            level=LogLevel(log_dict.get('level', LogLevel.INFO.value)),
            log_to_file=log_dict.get('log_to_file', False),
            log_to_console=log_dict.get('log_to_console', True),
            log_file_path=log_dict.get('log_file_path'),
            max_file_size_mb=log_dict.get('max_file_size_mb', 10),
            backup_count=log_dict.get('backup_count', 5)
        )

        return Config(serial=serial, engine=engine, logging=logging_config)

    @property
    def config_path(self) -> Optional[Path]:
        """Path of the loaded configuration file, if any."""
        return self._config_path

    def get_config(self) -> Config:
        """Get current configuration object.

        Raises:
            RuntimeError: If configuration not loaded.
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config

    def validate(self) -> List[str]:
        """Validate current configuration; returns error messages (empty if valid)."""
        if self._config is None:
            return ["Configuration not loaded"]

        _, errors = ConfigSchema.validate_config(self._config.to_dict())
        return errors

    def show_config(self) -> Dict[str, Any]:
        """Show current configuration with the source of each value.

        Example:
            {
                "engine": {
                    "timeout_ms": {"value": 2500, "source": "env"},
                    "echo": {"value": False, "source": "default"}
                }
            }
        """
        config_dict = self.get_config().to_dict()

        result: Dict[str, Any] = {}
        for section, section_values in config_dict.items():
            result[section] = {}
            for key, value in section_values.items():
                result[section][key] = {
                    "value": value,
                    "source": self._config_source.get(f"{section}.{key}", "unknown")
                }

        return result

    @classmethod
    def reset(cls) -> None:
        """Reset singleton instance (for testing)."""
        cls._instance = None
