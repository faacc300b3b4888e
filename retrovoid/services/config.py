"""Configuration service for reading application settings."""

import json
import os
from pathlib import Path
from typing import Any

import structlog

from ..models import AppConfig

log = structlog.stdlib.get_logger()

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "retrovoid" / "config.json"
DEFAULT_CATALOG_PATH = Path.home() / ".local" / "share" / "retrovoid" / "catalog.json"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Loads the JSON configuration file, falling back to defaults."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or DEFAULT_CONFIG_PATH
        log.debug("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return the default configuration.

        ``IGDB_CLIENT_ID`` and ``IGDB_CLIENT_SECRET`` in the environment take
        precedence over the file.
        """
        config = self._read_file()
        return self._apply_environment(config)

    def _read_file(self) -> AppConfig:
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults", config_path=str(self.config_path))
            return self.get_default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError(f"Expected JSON object (dict), got {type(data).__name__}")

            config = self._dict_to_config(data)
        except (OSError, json.JSONDecodeError, TypeError, ValueError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self.get_default_config()

        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
            return self.get_default_config()

        log.info("Configuration loaded successfully", config_path=str(self.config_path))
        return config

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        if not isinstance(config.catalog_path, Path):
            errors.append("catalog_path must be a Path object")
        elif not config.catalog_path.is_absolute():
            errors.append("catalog_path must be an absolute path")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if not config.default_playlist_platform:
            errors.append("default_playlist_platform cannot be empty")

        if not isinstance(config.request_delay, (int, float)) or config.request_delay < 0:
            errors.append("request_delay must be a non-negative number")
        elif config.request_delay > 60:
            errors.append("request_delay should not exceed 60 seconds")

        if bool(config.igdb_client_id) != bool(config.igdb_client_secret):
            errors.append("igdb_client_id and igdb_client_secret must be set together")

        return ValidationResult(len(errors) == 0, errors)

    @staticmethod
    def get_default_config() -> AppConfig:
        return AppConfig(catalog_path=DEFAULT_CATALOG_PATH)

    @staticmethod
    def _apply_environment(config: AppConfig) -> AppConfig:
        client_id = os.getenv("IGDB_CLIENT_ID")
        client_secret = os.getenv("IGDB_CLIENT_SECRET")
        if not (client_id and client_secret):
            return config

        log.debug("Using IGDB credentials from environment")
        return AppConfig(
            catalog_path=config.catalog_path,
            log_level=config.log_level,
            default_playlist_platform=config.default_playlist_platform,
            igdb_client_id=client_id,
            igdb_client_secret=client_secret,
            request_delay=config.request_delay,
        )

    @staticmethod
    def _dict_to_config(data: dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig."""
        catalog_raw = data.get("catalog_path")
        catalog_path = Path(str(catalog_raw)).expanduser() if catalog_raw else DEFAULT_CATALOG_PATH

        request_delay_raw = data.get("request_delay", 0.25)
        if not isinstance(request_delay_raw, (int, float)) or isinstance(request_delay_raw, bool):
            raise TypeError("request_delay must be a number")

        def optional_str(key: str) -> str | None:
            value = data.get(key)
            return str(value) if value else None

        return AppConfig(
            catalog_path=catalog_path,
            log_level=str(data.get("log_level", "INFO")).upper(),
            default_playlist_platform=str(data.get("default_playlist_platform", "ps1")),
            igdb_client_id=optional_str("igdb_client_id"),
            igdb_client_secret=optional_str("igdb_client_secret"),
            request_delay=float(request_delay_raw),
        )
