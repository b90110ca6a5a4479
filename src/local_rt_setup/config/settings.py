# local_rt_setup/config/settings.py
"""Manages the tunable settings of a provisioning run.

This module provides the `Settings` class, which holds nested default values
for the local server endpoints, the admin credentials of a fresh
installation, the polling budget, the release download location and the
logging levels. An optional JSON file can override any subset of them.

Settings are accessed programmatically using dot-notation
(e.g., `settings.get('server.artifactory_url')`).
"""

import os
import json
import logging
import collections.abc
from typing import Any, Dict, Optional

from local_rt_setup.error import ConfigurationError

logger = logging.getLogger(__name__)

RELEASES_BASE_URL = (
    "https://releases.jfrog.io/artifactory/artifactory-pro/"
    "org/artifactory/pro/jfrog-artifactory-pro"
)


def deep_merge(source: Dict, destination: Dict) -> Dict:
    """
    Recursively merges the `source` dictionary into the `destination` dictionary.

    Nested dictionaries are merged, while other values in `source` overwrite
    those in `destination`.

    Args:
        source: The dictionary with new or updated values.
        destination: The dictionary to be updated.

    Returns:
        The merged dictionary (`destination`).
    """
    for key, value in source.items():
        if isinstance(value, collections.abc.Mapping):
            node = destination.setdefault(key, {})
            deep_merge(value, node)
        else:
            destination[key] = value
    return destination


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _resolve_log_level(key: str, value: Any) -> int:
    """Accepts a numeric level or a level name such as ``"debug"``."""
    if _is_int(value):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    raise ConfigurationError(f"Invalid log level for '{key}': {value!r}")


class Settings:
    """Read-only view over the defaults, optionally overridden by a JSON file.

    Unlike a persistent application config, nothing is ever written back:
    a provisioning run reads its settings once at startup.
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initializes the Settings object.

        Args:
            config_path: Optional path to a JSON file whose values are
                deep-merged over the defaults.

        Raises:
            ConfigurationError: If `config_path` is given but cannot be read
                or does not contain a JSON object.
        """
        logger.debug("Initializing Settings")
        self.config_path = config_path
        self._settings: Dict[str, Any] = {}
        self.load()

    @property
    def default_config(self) -> dict:
        """Provides the default values.

        The endpoints and credentials match what a freshly unpacked
        Artifactory listens on and accepts.

        Returns:
            A dictionary of default settings with a nested structure.
        """
        return {
            "server": {
                "artifactory_url": "http://localhost:8081/artifactory/",
                "access_url": "http://localhost:8081/access/",
                "username": "admin",
                "password": "password",
            },
            "polling": {
                "interval_seconds": 10,
                "max_wait_seconds": 300,
            },
            "download": {
                "base_url": RELEASES_BASE_URL,
                "timeout": 30,
            },
            "http": {
                "timeout": 30,
            },
            "logging": {
                "file_level": logging.INFO,
                "cli_level": logging.INFO,
            },
        }

    def load(self):
        """Builds the settings from the defaults and the optional override file.

        Raises:
            ConfigurationError: If the override file is unreadable or invalid,
                or a value in it cannot be used.
        """
        # Always start with a fresh copy of the defaults to build upon.
        self._settings = self.default_config

        if self.config_path:
            self._load_overrides()
        self._validate()

    def _load_overrides(self):
        if not os.path.isfile(self.config_path):
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}"
            )
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)
        except (ValueError, OSError) as e:
            raise ConfigurationError(
                f"Could not load config file at {self.config_path}: {e}"
            ) from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Config file {self.config_path} must contain a JSON object."
            )

        deep_merge(user_config, self._settings)
        logger.info(f"Loaded settings overrides from {self.config_path}")

    def _validate(self):
        """Normalizes log levels and checks the polling budget.

        Raises:
            ConfigurationError: On an unknown log level or a polling value
                that is not a usable whole number of seconds.
        """
        logging_section = self._settings.get("logging")
        if not isinstance(logging_section, dict):
            raise ConfigurationError("Setting 'logging' must be an object.")
        for name in ("file_level", "cli_level"):
            logging_section[name] = _resolve_log_level(
                f"logging.{name}", logging_section.get(name)
            )

        interval = self.get("polling.interval_seconds")
        if not _is_int(interval) or interval <= 0:
            raise ConfigurationError(
                f"Setting 'polling.interval_seconds' must be a positive integer, got {interval!r}."
            )
        max_wait = self.get("polling.max_wait_seconds")
        if not _is_int(max_wait) or max_wait < 0:
            raise ConfigurationError(
                f"Setting 'polling.max_wait_seconds' must be a non-negative integer, got {max_wait!r}."
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a setting value using dot-notation for nested access.

        Example: `settings.get("polling.interval_seconds")`

        Args:
            key: The dot-separated configuration key.
            default: The value to return if the key is not found.

        Returns:
            The value associated with the key, or the default value.
        """
        d = self._settings
        try:
            for k in key.split("."):
                d = d[k]
            return d
        except (KeyError, TypeError):
            return default
