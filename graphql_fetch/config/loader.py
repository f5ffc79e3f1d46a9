"""
Configuration loader for graphql_fetch.

This module loads client settings from a JSON configuration file and from
``GRAPHQL_FETCH_*`` environment variables. Environment values win.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import ClientSettings


class ConfigLoader:
    """Configuration loader with support for file and environment sources."""

    def __init__(self, env_prefix: str = "GRAPHQL_FETCH_") -> None:
        """Initialize configuration loader."""
        self.config_paths = [
            Path("graphql_fetch.json"),
            Path("config/graphql_fetch.json"),
        ]

        # Environment variable prefix
        self.env_prefix = env_prefix

    def load_settings(self, config_file: Optional[Union[str, Path]] = None) -> ClientSettings:
        """
        Load settings from all available sources.

        Args:
            config_file: Specific config file to load instead of searching

        Returns:
            ClientSettings with merged configuration

        Raises:
            ConfigError: If a source cannot be parsed or fails validation
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_from_file(config_file)
        if file_config:
            config_data.update(file_config)

        config_data.update(self._load_from_environment())

        try:
            return ClientSettings(**config_data)
        except ValidationError as e:
            raise ConfigError(f"invalid settings: {e}", errors=e.errors()) from e

    def _load_from_file(
        self, config_file: Optional[Union[str, Path]] = None
    ) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"config file not found: {config_path}")
            return self._parse_config_file(config_path)

        for config_path in self.config_paths:
            if config_path.exists():
                return self._parse_config_file(config_path)

        return None

    def _parse_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Parse a JSON configuration file."""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f) or {}
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a JSON object")
        return data

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        env_mappings: Dict[str, Tuple[str, Callable[[str], Any]]] = {
            f"{self.env_prefix}URL": ("url", str),
            f"{self.env_prefix}HEADERS": ("headers", self._parse_json_object),
            f"{self.env_prefix}FETCH_OPTIONS": ("fetch_options", self._parse_json_object),
            f"{self.env_prefix}SSR_MODE": ("ssr_mode", self._convert_env_value),
            f"{self.env_prefix}LOG_ERRORS": ("log_errors", self._convert_env_value),
            f"{self.env_prefix}TIMEOUT": ("timeout", float),
        }

        for env_var, (key, convert) in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                try:
                    config[key] = convert(value)
                except ValueError as e:
                    raise ConfigError(f"invalid value for {env_var}: {e}") from e

        return config

    def _parse_json_object(self, value: str) -> Dict[str, Any]:
        data = json.loads(value)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return data

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to appropriate type."""
        lower = value.lower()
        if lower in ("true", "yes", "1", "on"):
            return True
        if lower in ("false", "no", "0", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value


def load_settings(config_file: Optional[Union[str, Path]] = None) -> ClientSettings:
    """Load client settings with the default loader."""
    return ConfigLoader().load_settings(config_file)
