"""
Configuration Module for the Slip Matching System.

Centralized configuration loaded from ``settings.yaml``. Scoring weights,
confidence bands, the shipping service list, the label name deny-list and
logging options are all read through ``get_config`` so they can be tuned
without touching code.

The settings file defaults to ``config/settings.yaml``; set the
``SLIPMATCH_CONFIG`` environment variable (or pass a path to
``ConfigurationManager``) to use another file.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from slipmatch.utils.exceptions import ConfigurationError

CONFIG_ENV_VAR = "SLIPMATCH_CONFIG"


class ConfigurationManager:
    """
    Singleton access to the YAML settings.

    Attributes:
        config_path (Path): Path to the loaded settings file.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("matching.acceptance_threshold")
        50
        >>> config.get("reporting.standard_service")
        "2nd Class"
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to a settings file. Only honoured on
                first construction; call ``reset`` to switch files.
        """
        if self._initialized:
            return

        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR)

        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Load configuration from the YAML file.

        Raises:
            FileNotFoundError: If the settings file doesn't exist.
            ConfigurationError: If the file is not a valid YAML mapping.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(str(self.config_path), reason=str(e)) from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                str(self.config_path), reason="top level must be a mapping"
            )
        self._config = loaded

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Key in dot notation (e.g., "matching.scores.name_match").
            default: Value returned when the key doesn't exist.

        Returns:
            Configuration value or default.
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def section(self, key: str) -> Dict[str, Any]:
        """Return a copy of a mapping section, or an empty dict."""
        value = self.get(key, {})
        return dict(value) if isinstance(value, dict) else {}

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next construction reloads settings."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience accessor for configuration values.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
