"""Path configuration utilities for screen-text.

This module provides centralized path management for the application home
(configuration and logs) and for the default screenshot location on the
user's desktop.
"""
import os
from pathlib import Path

HOME_ENV_VAR = "SCREEN_TEXT_HOME"
DEFAULT_SCREENSHOTS_FOLDER = "mcp-screenshots"


def get_app_root():
    """Get the root directory holding configuration and logs."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return str(Path(override).expanduser().absolute())
    return str(Path.home() / ".screen-text")


def get_config_dir():
    """Get the configuration directory path."""
    return os.path.join(get_app_root(), "config")


def get_config_file():
    """Get the main configuration file path."""
    return os.path.join(get_config_dir(), "config.json")


def get_logs_dir():
    """Get the logs directory path."""
    logs_dir = os.path.join(get_app_root(), "logs")
    os.makedirs(logs_dir, exist_ok=True)
    return logs_dir


def get_desktop_dir():
    """Get the invoking user's desktop directory."""
    return str(Path.home() / "Desktop")


def get_screenshots_dir(base_dir=None, folder_name=DEFAULT_SCREENSHOTS_FOLDER):
    """Get the screenshots directory path. Does not create it."""
    base = os.path.expanduser(base_dir) if base_dir else get_desktop_dir()
    return os.path.abspath(os.path.join(base, folder_name))
