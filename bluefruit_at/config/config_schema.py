"""JSON Schema validation for the Bluefruit AT configuration.

Provides schema definition and validation logic with clear error messages.
"""

import copy
from typing import List, Tuple, Dict, Any

import jsonschema
from jsonschema import Draft7Validator


class ConfigSchema:
    """Configuration schema validator using JSON Schema Draft 7.

    Example:
        >>> is_valid, errors = ConfigSchema.validate_config(config_dict)
        >>> if not is_valid:
        ...     for error in errors:
        ...         print(error)
    """

    # Rates the Bluefruit LE UART Friend accepts for AT+BAUDRATE
    VALID_BAUD_RATES = [1200, 2400, 4800, 9600, 14400, 19200, 28800, 38400,
                        57600, 76800, 115200, 230400, 250000, 460800, 921600, 1000000]

    VALID_LINE_TERMINATORS = ["\n", "\r\n"]

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        """Get JSON Schema Draft 7 for configuration validation."""
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "Bluefruit AT Configuration",
            "description": "Configuration schema for the Bluefruit AT command tool",
            "type": "object",
            "properties": {
                "serial": {
                    "type": "object",
                    "description": "Serial port settings",
                    "properties": {
                        "port": {
                            "type": ["string", "null"],
                            "description": "Serial port device, or null for the first available port",
                            "minLength": 1
                        },
                        "baud_rate": {
                            "type": "integer",
                            "description": "Baud rate for serial communication",
                            "enum": ConfigSchema.VALID_BAUD_RATES
                        },
                        "line_terminator": {
                            "type": "string",
                            "description": "Terminator appended to every command",
                            "enum": ConfigSchema.VALID_LINE_TERMINATORS
                        },
                        "open_settle_ms": {
                            "type": "integer",
                            "description": "Delay after opening the port before the first command",
                            "minimum": 0,
                            "maximum": 5000
                        }
                    },
                    "additionalProperties": False
                },
                "engine": {
                    "type": "object",
                    "description": "Request engine settings",
                    "properties": {
                        "timeout_ms": {
                            "type": "integer",
                            "description": "Per-request timeout in milliseconds",
                            "minimum": 1,
                            "maximum": 600000
                        },
                        "poll_interval_ms": {
                            "type": "integer",
                            "description": "Sleep between polls while waiting for bytes",
                            "minimum": 0,
                            "maximum": 1000
                        },
                        "echo": {
                            "type": "boolean",
                            "description": "Mirror commands and received characters to stdout"
                        }
                    },
                    "additionalProperties": False
                },
                "logging": {
                    "type": "object",
                    "description": "Communication logging settings",
                    "properties": {
                        "enabled": {
                            "type": "boolean",
                            "description": "Enable communication logging"
                        },
                        "level": {
                            "type": "string",
                            "description": "Logging level",
                            "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]
                        },
                        "log_to_file": {
                            "type": "boolean",
                            "description": "Enable logging to file"
                        },
                        "log_to_console": {
                            "type": "boolean",
                            "description": "Enable logging to console"
                        },
                        "log_file_path": {
                            "type": ["string", "null"],
                            "description": "Path to log file"
                        },
                        "max_file_size_mb": {
                            "type": "integer",
                            "description": "Maximum log file size in megabytes",
                            "minimum": 1,
                            "maximum": 1000
                        },
                        "backup_count": {
                            "type": "integer",
                            "description": "Number of backup log files to keep",
                            "minimum": 0,
                            "maximum": 100
                        }
                    },
                    "additionalProperties": False
                }
            },
            "additionalProperties": False
        }

    @staticmethod
    def validate_config(config: Dict[str, Any], strict: bool = True) -> Tuple[bool, List[str]]:
        """Validate configuration dictionary against schema.

        Args:
            config: Configuration dictionary to validate.
            strict: If True, reject unknown fields.

        Returns:
            Tuple of (is_valid, error_messages).

        Example:
            >>> ConfigSchema.validate_config({"engine": {"timeout_ms": 2000}})
            (True, [])
        """
        schema = ConfigSchema.get_schema()
        if not strict:
            schema = ConfigSchema._make_permissive(schema)

        validator = Draft7Validator(schema)
        errors = [
            ConfigSchema._format_error(error)
            for error in sorted(validator.iter_errors(config), key=lambda e: list(e.path))
        ]
        return len(errors) == 0, errors

    @staticmethod
    def _make_permissive(schema: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of the schema that allows unknown properties."""
        permissive_schema = copy.deepcopy(schema)

        def remove_additional_properties(obj):
            if isinstance(obj, dict):
                obj.pop("additionalProperties", None)
                for value in obj.values():
                    remove_additional_properties(value)

        remove_additional_properties(permissive_schema)
        return permissive_schema

    @staticmethod
    def _format_error(error: jsonschema.exceptions.ValidationError) -> str:
        """Format a validation error with its section, field and an example.

        Example:
            "Section 'engine', field 'timeout_ms': Value must be >= 1, got 0.
             Example: timeout_ms: 1"
        """
        path_parts = list(error.path)
        if len(path_parts) == 0:
            section = "root"
            field = "configuration"
        elif len(path_parts) == 1:
            section = path_parts[0]
            field = "section"
        else:
            section = path_parts[0]
            field = ".".join(str(p) for p in path_parts[1:])

        if error.validator == "type":
            actual_value = error.instance
            return (f"Section '{section}', field '{field}': Expected type {error.validator_value}, "
                    f"got {type(actual_value).__name__} (value: {actual_value!r}).")
        elif error.validator == "enum":
            expected_values = error.validator_value
            return (f"Section '{section}', field '{field}': Expected one of {expected_values}, "
                    f"got {error.instance!r}. Example: {field}: {expected_values[0]!r}")
        elif error.validator == "minimum":
            return (f"Section '{section}', field '{field}': Value must be >= {error.validator_value}, "
                    f"got {error.instance}. Example: {field}: {error.validator_value}")
        elif error.validator == "maximum":
            return (f"Section '{section}', field '{field}': Value must be <= {error.validator_value}, "
                    f"got {error.instance}. Example: {field}: {error.validator_value}")
        elif error.validator == "additionalProperties":
            extra_props = set(error.instance.keys()) - set(error.schema.get('properties', {}).keys())
            return (f"Section '{section}': Unknown fields {sorted(extra_props)} not allowed. "
                    f"Remove unknown fields or use permissive validation mode.")
        return f"Section '{section}', field '{field}': {error.message}"
