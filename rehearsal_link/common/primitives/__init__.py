"""
Layer 1: PRIMITIVES - pure numpy/scipy math.

No audio I/O and no knowledge of segments or configuration.
"""

from .waveform import (
    as_frames,
    bucket_layout,
    minmax_buckets,
    StreamingMinMaxReducer,
)

from .spectral import (
    is_power_of_two,
    hann_window,
    fft_bin_frequencies,
    compute_rms,
    compute_zero_crossing_rate,
    compute_magnitude_spectrum,
    compute_spectral_centroid,
    band_bin_range,
    compute_band_energy,
)

from .gain import (
    SILENCE_FLOOR,
    db_to_amplitude,
    amplitude_to_db,
    apply_gain,
    peak_level,
    rms_level,
    peak_gain,
    rms_gain,
    peak_normalize,
    rms_normalize,
)

__all__ = [
    # Waveform
    'as_frames',
    'bucket_layout',
    'minmax_buckets',
    'StreamingMinMaxReducer',
    # Spectral
    'is_power_of_two',
    'hann_window',
    'fft_bin_frequencies',
    'compute_rms',
    'compute_zero_crossing_rate',
    'compute_magnitude_spectrum',
    'compute_spectral_centroid',
    'band_bin_range',
    'compute_band_energy',
    # Gain
    'SILENCE_FLOOR',
    'db_to_amplitude',
    'amplitude_to_db',
    'apply_gain',
    'peak_level',
    'rms_level',
    'peak_gain',
    'rms_gain',
    'peak_normalize',
    'rms_normalize',
]
