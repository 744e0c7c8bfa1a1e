"""Loudness normalization of whole PCM sources."""

from typing import Optional

from ...common.logging import get_logger, format_decibels
from ...common.primitives import peak_gain, rms_gain, rms_level, apply_gain
from ..errors import ConfigurationError
from .source import ArrayPCMSource, PCMSource

logger = get_logger(__name__)

NORMALIZATION_METHODS = ('peak', 'rms')


def normalize_source(
    source: PCMSource,
    method: str = 'rms',
    target_db: Optional[float] = None,
    max_gain: float = 1000.0,
) -> ArrayPCMSource:
    """
    Produce a loudness-normalized copy of a source.

    The result is a new in-memory source; the input is left untouched.
    Submitting the result for analysis replaces all derived state.

    Args:
        source: Source to normalize
        method: 'peak' (default target -3 dBFS) or 'rms' (default -20 dBFS)
        target_db: Target level in dBFS
        max_gain: Upper bound on the RMS gain

    Returns:
        ArrayPCMSource with the gain applied
    """
    if method not in NORMALIZATION_METHODS:
        raise ConfigurationError(
            f"Unknown normalization method: {method!r}",
            data={"method": method, "valid": list(NORMALIZATION_METHODS)},
        )

    buffer = source.read_all()
    if method == 'peak':
        gain = peak_gain(buffer, -3.0 if target_db is None else target_db)
    else:
        gain = rms_gain(buffer, -20.0 if target_db is None else target_db, max_gain)

    logger.info(
        f"Normalizing ({method}): level {format_decibels(rms_level(buffer))}, "
        f"gain {format_decibels(gain).replace('dBFS', 'dB')}",
        data={"method": method, "gain": gain},
    )

    name = getattr(source, 'name', 'buffer')
    return ArrayPCMSource(apply_gain(buffer, gain), source.sample_rate, name=name)


def normalize_source_from_config(source: PCMSource, config) -> ArrayPCMSource:
    """normalize_source() with method/targets taken from the normalization section."""
    method = config.get('normalization.method', 'rms')
    target_key = 'normalization.peak_target_db' if method == 'peak' else 'normalization.rms_target_db'
    return normalize_source(
        source,
        method=method,
        target_db=config.get(target_key),
        max_gain=config.get('normalization.max_gain', 1000.0),
    )
