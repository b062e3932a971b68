"""Configuration loader for screen-text.

Configuration is resolved in three layers:
- built-in defaults
- ``config.json`` in the configuration directory (deep merged)
- ``SCREEN_TEXT_<SECTION>_<KEY>`` environment variables, including those
  loaded from a ``.env`` file in the working directory

Environment values are coerced to the type of the default they override.
Invalid values are logged and reset to their defaults.
"""
import copy
import json
import logging
import os
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv

from .path_config import get_config_file

logger = logging.getLogger(__name__)

ENV_PREFIX = "SCREEN_TEXT_"

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "file": "screen_text.log",
    },
    "server": {
        "name": "mcp-screen-text",
        "transport": "stdio",
        "host": "127.0.0.1",
        "port": 5348,
        "room": "screen_text_room",
        "cors_origins": "*",
    },
    "storage": {
        "base_dir": "",
        "folder_name": "mcp-screenshots",
    },
    "capture": {
        "default_format": "png",
        "jpeg_quality": 90,
        "settle_delay": 0.5,
        "fallback_display": 0,
    },
    "recognition": {
        "default_language": "eng",
        "tesseract_cmd": "",
        "tesseract_config": "",
        "honor_requested_format": False,
    },
}


def _coerce(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of ``default``."""
    if isinstance(default, bool):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    if isinstance(default, int):
        return int(float(raw))
    if isinstance(default, float):
        return float(raw)
    return raw


class ConfigManager:
    def __init__(self, config_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize the configuration manager.

        Args:
            config_file: JSON file to merge over the defaults
            environ: Environment mapping used for overrides (defaults to os.environ)
        """
        self._config_file = config_file or get_config_file()
        self._environ = os.environ if environ is None else environ
        self._config: Dict[str, Dict[str, Any]] = copy.deepcopy(DEFAULT_CONFIG)
        self._load_config_file()
        self._load_env_overrides()
        self._validate_config()

    def _load_config_file(self) -> None:
        """Load configuration from the JSON file, if present."""
        if not os.path.exists(self._config_file):
            logger.debug(f"No config file at {self._config_file}, using defaults")
            return
        try:
            with open(self._config_file, 'r') as f:
                file_config = json.load(f)
            if not isinstance(file_config, dict):
                raise ValueError("top-level JSON value must be an object")
            self._merge_config(self._config, file_config)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading config file {self._config_file}: {e}")

    def _merge_config(self, base: Dict, update: Dict) -> None:
        """Merge ``update`` into ``base`` in place; nested sections merge key by key."""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict):
                if isinstance(value, dict):
                    self._merge_config(base[key], value)
                else:
                    logger.error(f"Ignoring config section {key!r}: expected an object, got {value!r}")
            else:
                base[key] = value

    def _load_env_overrides(self) -> None:
        """Apply SCREEN_TEXT_<SECTION>_<KEY> environment overrides."""
        for section, values in DEFAULT_CONFIG.items():
            for key, default in values.items():
                env_name = f"{ENV_PREFIX}{section}_{key}".upper()
                raw = self._environ.get(env_name)
                if raw is None:
                    continue
                try:
                    self._config[section][key] = _coerce(raw, default)
                except ValueError:
                    logger.error(f"Ignoring invalid value for {env_name}: {raw!r}")

    def _validate_config(self) -> None:
        """Validate known keys, resetting invalid values to their defaults."""
        checks = {
            ("capture", "default_format"): lambda v: v in ("png", "jpg"),
            ("capture", "jpeg_quality"): lambda v: isinstance(v, int) and 1 <= v <= 100,
            ("capture", "settle_delay"): lambda v: isinstance(v, (int, float)) and 0 <= v <= 5,
            ("capture", "fallback_display"): lambda v: isinstance(v, int) and v >= 0,
            ("server", "port"): lambda v: isinstance(v, int) and 0 < v < 65536,
            ("server", "transport"): lambda v: v in ("stdio", "socketio"),
        }
        for (section, key), is_valid in checks.items():
            value = self.get(section, key)
            if not is_valid(value):
                default = DEFAULT_CONFIG[section][key]
                logger.error(f"Invalid config value {section}.{key}={value!r}, using {default!r}")
                self.set(section, key, default)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Return ``section.key``, or ``default`` when either is missing."""
        try:
            return self._config[section][key]
        except KeyError:
            return default

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value."""
        if section not in self._config:
            self._config[section] = {}
        self._config[section][key] = value

    def section(self, section: str) -> Dict[str, Any]:
        """Get a copy of one configuration section."""
        return dict(self._config.get(section, {}))

    def save(self) -> bool:
        """
        Save current configuration to the config file.
        Returns:
            bool: True if save was successful, False otherwise
        """
        try:
            os.makedirs(os.path.dirname(self._config_file), exist_ok=True)
            with open(self._config_file, 'w') as f:
                json.dump(self._config, f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving config to {self._config_file}: {e}")
            return False

    @property
    def config(self) -> Dict[str, Any]:
        """A deep copy of the resolved configuration."""
        return copy.deepcopy(self._config)


# Existing environment variables take precedence over .env entries
load_dotenv(find_dotenv(usecwd=True))

# Shared instance used by the entry point
config = ConfigManager()
