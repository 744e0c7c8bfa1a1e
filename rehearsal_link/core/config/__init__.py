"""Configuration: YAML analysis parameters and environment settings."""

from .config import Config, get_config, DEFAULT_CONFIG_PATH
from .settings import Settings, LogLevel, get_settings, reset_settings

__all__ = [
    'Config',
    'get_config',
    'DEFAULT_CONFIG_PATH',
    'Settings',
    'LogLevel',
    'get_settings',
    'reset_settings',
]
