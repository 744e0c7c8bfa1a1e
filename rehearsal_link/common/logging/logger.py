"""Centralized logging configuration."""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

from .formatters import JSONFormatter, StructuredLogAdapter
from .correlation import RunContextLogFilter


# Global flag to track if logging is configured
_logging_configured = False


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 3,
    force: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR). If None, uses Settings
        log_file: Path to local log file (optional). If None, uses Settings
        json_format: Use JSON formatter for console logs. If None, uses Settings
        max_bytes: Max file size before rotation
        backup_count: Number of backup files
        force: Reconfigure even if logging was already set up
    """
    global _logging_configured
    if _logging_configured and not force:
        return

    # Environment settings fill whatever the caller left open
    if level is None or json_format is None or log_file is None:
        from ...core.config.settings import get_settings

        settings = get_settings()
        if level is None:
            level = settings.log_level.value
        if json_format is None:
            json_format = settings.log_json
        if log_file is None:
            log_file = settings.log_file

    numeric_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    context_filter = RunContextLogFilter()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.addFilter(context_filter)

    if json_format:
        console_handler.setFormatter(JSONFormatter(include_path=False))
    else:
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(run_id)s] %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(numeric_level)
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    _logging_configured = True


def get_logger(name: str) -> StructuredLogAdapter:
    """
    Get structured logger adapter for a module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogAdapter with structured data support
    """
    return StructuredLogAdapter(logging.getLogger(name))
