"""Logging utilities for rehearsal analysis."""

from .logger import setup_logging, get_logger
from .formatters import JSONFormatter, StructuredLogAdapter
from .correlation import (
    RunContextLogFilter,
    generate_run_id,
    get_run_id,
    set_run_id,
    get_generation,
    set_generation,
    clear_run_context,
)
from .warnings_config import suppress_audio_warnings
from .format import (
    format_time,
    format_time_range,
    format_duration,
    format_percent,
    format_decibels,
)

__all__ = [
    # Logger
    'setup_logging',
    'get_logger',
    # Structured logging
    'JSONFormatter',
    'StructuredLogAdapter',
    # Run context
    'RunContextLogFilter',
    'generate_run_id',
    'get_run_id',
    'set_run_id',
    'get_generation',
    'set_generation',
    'clear_run_context',
    # Warnings
    'suppress_audio_warnings',
    # Format
    'format_time',
    'format_time_range',
    'format_duration',
    'format_percent',
    'format_decibels',
]
