"""Configuration management for adbsink.

Settings are resolved from environment variables first, then from
``~/.config/adbsink/config.json``, then from built-in defaults.
"""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Optional

from .exceptions import SinkConfigError
from .utils import DEFAULT_ADB_TIMEOUT, DEFAULT_COMPRESSION

logger = logging.getLogger(__name__)

ENV_CONFIG_DIR = "ADBSINK_CONFIG_DIR"
ENV_ADB_PATH = "ADBSINK_ADB_PATH"
ENV_SERIAL = "ANDROID_SERIAL"
ENV_COMPRESSION = "ADBSINK_COMPRESSION"
ENV_TIMEOUT = "ADBSINK_TIMEOUT"

CONFIG_FILE_NAME = "config.json"


class Config:
    """Configuration manager for adbsink."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding config.json. Defaults to
                $ADBSINK_CONFIG_DIR or ~/.config/adbsink
        """
        if config_dir is None:
            env_dir = os.environ.get(ENV_CONFIG_DIR)
            config_dir = (
                Path(env_dir) if env_dir else Path.home() / ".config" / "adbsink"
            )
        self.config_dir = config_dir
        self._data: dict[str, Any] = {}
        self.load()

    def get_config_path(self) -> Path:
        """Get path to the configuration file."""
        return self.config_dir / CONFIG_FILE_NAME

    def load(self) -> None:
        """Load the configuration file if it exists."""
        path = self.get_config_path()
        self._data = {}
        if not path.exists():
            return
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable config file {path}: {e}")
            return
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {path}: expected a JSON object")
            return
        self._data = data

    def _get_str(self, env_var: str, key: str) -> Optional[str]:
        value = os.environ.get(env_var)
        if value:
            return value
        value = self._data.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise SinkConfigError(f"Config value '{key}' must be a string")
        return value

    @property
    def adb_path(self) -> str:
        """Path to the adb binary (falls back to a PATH lookup)."""
        configured = self._get_str(ENV_ADB_PATH, "adb_path")
        if configured:
            return configured
        return shutil.which("adb") or "adb"

    @property
    def serial(self) -> Optional[str]:
        """Serial of the device to use, if one is pinned."""
        return self._get_str(ENV_SERIAL, "serial")

    @property
    def compression(self) -> Optional[str]:
        """Compression algorithm for adb push/pull, or None to disable.

        The literal value "none" disables compression.
        """
        value = self._get_str(ENV_COMPRESSION, "compression")
        if value is None:
            return DEFAULT_COMPRESSION
        if value.lower() == "none":
            return None
        return value

    @property
    def timeout(self) -> float:
        """Timeout in seconds for a single adb invocation."""
        raw: Any = os.environ.get(ENV_TIMEOUT) or self._data.get("timeout")
        if raw is None:
            return DEFAULT_ADB_TIMEOUT
        try:
            value = float(raw)
        except (TypeError, ValueError) as e:
            raise SinkConfigError(
                f"Config value 'timeout' must be a number: {raw}"
            ) from e
        if value <= 0:
            raise SinkConfigError("Config value 'timeout' must be positive")
        return value


config = Config()
