"""Configuration management for the CPU usage logger."""

import copy
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Optional

import structlog
import yaml

logger = structlog.get_logger()

LOG_LEVELS = ["debug", "info", "warning", "error"]

DEFAULT_CONFIG = {
    "time_between_measurements": 5,  # Seconds between cycles
    "measurement_time": 1,  # Seconds per sampling window
    "total_log_threshold": 30.0,  # System-wide alert %, inclusive
    "process_log_threshold": 15.0,  # Per-process alert %, inclusive
    "number_of_processes_to_show": 5,  # Rows in the usage table
    "cli": False,  # Redraw the table on stdout
    "log_file": None,  # Append alerts to this file
    "logging": {
        "level": "warning",  # Diagnostics on stderr
    },
}

_INT_FIELDS = {
    "time_between_measurements": 0,
    "measurement_time": 1,
    "number_of_processes_to_show": 0,
}
_FLOAT_FIELDS = ["total_log_threshold", "process_log_threshold"]


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""


@dataclass(frozen=True)
class Configuration:
    """Validated parameters of one run."""

    time_between_measurements: int = 5
    measurement_time: int = 1
    total_log_threshold: float = 30.0
    process_log_threshold: float = 15.0
    number_of_processes_to_show: int = 5
    cli: bool = False
    log_file: Optional[str] = None


def setup_logging(level: str = "warning") -> None:
    """Set up structlog diagnostics on stderr.

    Args:
        level: Minimum level name, one of LOG_LEVELS
    """
    log_level = level.upper()

    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger.debug("Logging initialized", log_level=log_level)


class ConfigManager:
    """Merge defaults, an optional YAML file and command-line overrides."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
    ):
        """Initialize configuration manager.

        Args:
            config_path: Path to a YAML configuration file
            overrides: Values given explicitly on the command line

        Raises:
            ConfigError: If the configuration file cannot be read
        """
        self.config_path = config_path
        self.config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            self.load_config()

        if overrides:
            self._merge_config(self.config, overrides)

    def load_config(self) -> None:
        """Load configuration from file."""
        path = os.path.expanduser(self.config_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load configuration", path=path, error=str(e))
            raise ConfigError(f"Cannot read configuration {path}: {e}") from e

        if file_config is None:
            file_config = {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"Configuration {path} must be a mapping")

        self._merge_config(self.config, file_config)
        logger.debug("Configuration loaded", path=path, config=self.config)

    def _merge_config(self, base: dict, override: dict) -> None:
        """Recursively merge override config into base config.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary
        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _errors(self) -> list[str]:
        errors = []
        for key in self.config:
            if key not in DEFAULT_CONFIG:
                errors.append(f"Unknown configuration key '{key}'")

        for key, minimum in _INT_FIELDS.items():
            value = self.config.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"'{key}' must be an integer")
            elif value < minimum:
                errors.append(f"'{key}' must be at least {minimum}")

        for key in _FLOAT_FIELDS:
            value = self.config.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                errors.append(f"'{key}' must be a number")
            elif value < 0:
                errors.append(f"'{key}' must not be negative")

        if not isinstance(self.config.get("cli"), bool):
            errors.append("'cli' must be true or false")

        log_file = self.config.get("log_file")
        if log_file is not None and not isinstance(log_file, str):
            errors.append("'log_file' must be a path")

        log_config = self.config.get("logging")
        if not isinstance(log_config, dict):
            errors.append("Logging configuration must be a dictionary")
        elif str(log_config.get("level", "")).lower() not in LOG_LEVELS:
            errors.append(f"Logging level must be one of {', '.join(LOG_LEVELS)}")

        return errors

    def validate_config(self) -> bool:
        """Validate the current configuration.

        Returns:
            True if configuration is valid, False otherwise
        """
        errors = self._errors()
        for error in errors:
            logger.error("Invalid configuration", error=error)
        return not errors

    @property
    def log_level(self) -> str:
        return str(self.config["logging"]["level"]).lower()

    def build(self) -> Configuration:
        """Build the immutable run configuration.

        Raises:
            ConfigError: If the merged configuration is invalid
        """
        if not self.validate_config():
            raise ConfigError(self._errors()[0])

        log_file = self.config["log_file"]
        return Configuration(
            time_between_measurements=self.config["time_between_measurements"],
            measurement_time=self.config["measurement_time"],
            total_log_threshold=float(self.config["total_log_threshold"]),
            process_log_threshold=float(self.config["process_log_threshold"]),
            number_of_processes_to_show=self.config["number_of_processes_to_show"],
            cli=self.config["cli"],
            log_file=os.path.expanduser(log_file) if log_file else None,
        )
