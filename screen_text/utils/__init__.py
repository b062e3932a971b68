"""Utility functions and helpers for screen-text"""
from .path_config import (
    get_app_root,
    get_config_dir,
    get_config_file,
    get_logs_dir,
    get_desktop_dir,
    get_screenshots_dir,
)
from .config_loader import ConfigManager, DEFAULT_CONFIG, config
from .logging_config import setup_logging

__all__ = [
    'get_app_root',
    'get_config_dir',
    'get_config_file',
    'get_logs_dir',
    'get_desktop_dir',
    'get_screenshots_dir',
    'ConfigManager',
    'DEFAULT_CONFIG',
    'config',
    'setup_logging',
]
