"""
Settings - Runtime configuration from the environment.

Environment variables:
- REHEARSAL_LINK_CONFIG: Path to a YAML file overriding default_config.yaml
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR
- LOG_JSON: true/false
- LOG_FILE: Optional rotating log file path
- ANALYSIS_WORKERS: Background analysis threads
"""

import os
from enum import Enum
from typing import Optional
from dataclasses import dataclass, field


class LogLevel(str, Enum):
    """Log level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class Settings:
    """Application settings from environment."""

    # Configuration file
    config_path: Optional[str] = field(
        default_factory=lambda: os.getenv("REHEARSAL_LINK_CONFIG")
    )

    # Logging
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    )
    log_json: bool = field(
        default_factory=lambda: os.getenv("LOG_JSON", "false").lower() == "true"
    )
    log_file: Optional[str] = field(
        default_factory=lambda: os.getenv("LOG_FILE")
    )

    # Performance
    analysis_workers: int = field(
        default_factory=lambda: int(os.getenv("ANALYSIS_WORKERS", "2"))
    )


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None
