"""
Gain Primitives - peak and RMS loudness normalization.

Buffers are (frames, channels) float32. Every function returns a new
array; inputs are never modified in place.
"""

import numpy as np

from .waveform import as_frames

# Below this level a buffer is treated as silent and left untouched
SILENCE_FLOOR = 1e-6


def db_to_amplitude(db: float) -> float:
    """Convert dBFS to linear amplitude."""
    return float(10.0 ** (db / 20.0))


def amplitude_to_db(amplitude: float) -> float:
    """Convert linear amplitude to dBFS (-inf for 0)."""
    if amplitude <= 0:
        return float('-inf')
    return float(20.0 * np.log10(amplitude))


def apply_gain(buffer: np.ndarray, gain: float) -> np.ndarray:
    """Scale every channel by a constant gain."""
    return np.ascontiguousarray(as_frames(buffer) * np.float32(gain), dtype=np.float32)


def peak_level(buffer: np.ndarray) -> float:
    """Largest absolute sample across all channels."""
    frames = as_frames(buffer)
    if frames.size == 0:
        return 0.0
    return float(np.max(np.abs(frames)))


def rms_level(buffer: np.ndarray) -> float:
    """Mean of the per-channel RMS levels."""
    frames = as_frames(buffer).astype(np.float64)
    if frames.size == 0:
        return 0.0
    return float(np.mean(np.sqrt(np.mean(frames ** 2, axis=0))))


def peak_gain(buffer: np.ndarray, target_db: float = -3.0) -> float:
    """Gain bringing the peak to target_db (1.0 for silent input)."""
    peak = peak_level(buffer)
    if peak < SILENCE_FLOOR:
        return 1.0
    return db_to_amplitude(target_db) / peak


def rms_gain(
    buffer: np.ndarray,
    target_db: float = -20.0,
    max_gain: float = 1000.0
) -> float:
    """
    Gain bringing the mean channel RMS to target_db.

    Capped at max_gain (1000 = +60 dB) so near-silent takes are not
    blown up into noise. Returns 1.0 for silent input.
    """
    rms = rms_level(buffer)
    if rms < SILENCE_FLOOR:
        return 1.0
    return min(db_to_amplitude(target_db) / rms, max_gain)


def peak_normalize(buffer: np.ndarray, target_db: float = -3.0) -> np.ndarray:
    """Normalize so the loudest sample sits at target_db."""
    return apply_gain(buffer, peak_gain(buffer, target_db))


def rms_normalize(
    buffer: np.ndarray,
    target_db: float = -20.0,
    max_gain: float = 1000.0
) -> np.ndarray:
    """
    Normalize the mean channel RMS to target_db.

    Stronger than peak normalization for quiet rehearsal recordings;
    samples may exceed full scale and are not clipped here.
    """
    return apply_gain(buffer, rms_gain(buffer, target_db, max_gain))
