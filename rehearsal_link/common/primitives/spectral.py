"""
Spectral Primitives - per-window energy, zero crossings and spectrum shape.

All functions operate on the last axis, so they accept a single window
(n_fft,) or a stack of windows (n_windows, n_fft).

All functions are pure numpy/scipy operations on arrays.
"""

import numpy as np
import scipy.fft
import scipy.signal
from typing import Optional, Tuple

# Magnitude sums below this count as silence for the centroid
CENTROID_EPS = 1e-10


def is_power_of_two(n: int) -> bool:
    """True for 1, 2, 4, 8, ..."""
    return n > 0 and (n & (n - 1)) == 0


def hann_window(n_fft: int) -> np.ndarray:
    """
    Periodic Hann window for spectral analysis.

    Args:
        n_fft: Window length in samples

    Returns:
        Window (n_fft,) as contiguous float32
    """
    return np.ascontiguousarray(
        scipy.signal.windows.hann(n_fft, sym=False),
        dtype=np.float32
    )


def fft_bin_frequencies(n_fft: int, sr: float) -> np.ndarray:
    """
    Center frequency of each retained FFT bin.

    Only the first n_fft // 2 bins are kept (Nyquist dropped).

    Returns:
        Frequencies in Hz, shape (n_fft // 2,)
    """
    return np.arange(n_fft // 2, dtype=np.float64) * (float(sr) / n_fft)


def compute_rms(frames: np.ndarray) -> np.ndarray:
    """
    Root-mean-square amplitude of raw samples.

    Args:
        frames: (n_fft,) or (n_windows, n_fft)

    Returns:
        RMS per window
    """
    frames = np.asarray(frames, dtype=np.float64)
    return np.sqrt(np.mean(frames ** 2, axis=-1))


def compute_zero_crossing_rate(frames: np.ndarray) -> np.ndarray:
    """
    Sign changes between adjacent samples, divided by window length.

    A sample is negative when < 0; zero counts as positive.

    Args:
        frames: (n_fft,) or (n_windows, n_fft)

    Returns:
        Zero-crossing rate per window, in [0, 1)
    """
    frames = np.asarray(frames)
    negative = frames < 0
    changes = negative[..., 1:] != negative[..., :-1]
    return np.count_nonzero(changes, axis=-1) / frames.shape[-1]


def compute_magnitude_spectrum(frames: np.ndarray, window: np.ndarray) -> np.ndarray:
    """
    Hann-windowed forward real FFT magnitudes.

    Args:
        frames: (n_fft,) or (n_windows, n_fft)
        window: Analysis window (n_fft,)

    Returns:
        Magnitudes of the first n_fft // 2 bins
    """
    n_fft = window.shape[0]
    windowed = np.ascontiguousarray(frames, dtype=np.float32) * window
    spectrum = scipy.fft.rfft(windowed, n=n_fft, axis=-1)
    return np.abs(spectrum[..., : n_fft // 2])


def compute_spectral_centroid(magnitudes: np.ndarray, freqs: np.ndarray) -> np.ndarray:
    """
    Magnitude-weighted mean frequency.

    Returns 0 for windows whose magnitude sum is ~0.

    Args:
        magnitudes: (..., n_bins)
        freqs: Bin frequencies (n_bins,)

    Returns:
        Centroid in Hz per window
    """
    magnitudes = np.asarray(magnitudes, dtype=np.float64)
    total = magnitudes.sum(axis=-1)
    weighted = (magnitudes * freqs).sum(axis=-1)
    safe_total = np.where(total > CENTROID_EPS, total, 1.0)
    return np.where(total > CENTROID_EPS, weighted / safe_total, 0.0)


def band_bin_range(
    low_hz: float,
    high_hz: float,
    sr: float,
    n_fft: int
) -> Tuple[int, int]:
    """
    Bin indices [start, end) covering low_hz to high_hz.

    Bin edges are truncated towards zero, so the range starts at the bin
    containing low_hz and stops before the bin containing high_hz.
    """
    bin_freq = float(sr) / n_fft
    return int(low_hz / bin_freq), int(high_hz / bin_freq)


def compute_band_energy(
    magnitudes: np.ndarray,
    start_bin: int,
    end_bin: Optional[int] = None
) -> np.ndarray:
    """
    Sum of magnitudes over bins [start_bin, end_bin).

    Args:
        magnitudes: (..., n_bins)
        start_bin: First bin (inclusive)
        end_bin: Last bin (exclusive); None = up to the last bin

    Returns:
        Band energy per window (0 for an empty range)
    """
    magnitudes = np.asarray(magnitudes, dtype=np.float64)
    return magnitudes[..., start_bin:end_bin].sum(axis=-1)
