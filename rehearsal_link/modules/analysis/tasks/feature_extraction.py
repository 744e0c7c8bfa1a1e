"""
Feature Extraction Task - per-window spectral features for classification.

One FeaturePoint per hop position 0, H, 2H, ... while a full window fits;
the trailing partial window is discarded. Features are produced by a
generator that reads the source window by window.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple, Union

import numpy as np

from .base import AudioContext, TaskResult, BaseTask, CancellationToken
from ....common.logging import get_logger
from ....common.primitives import (
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
from ....core.audio import PCMSource
from ....core.errors import ConfigurationError, FeatureExtractionError, FFTSetupError
from ....core.models import FeaturePoint

logger = get_logger(__name__)

DEFAULT_WINDOW_SIZE = 4096
DEFAULT_HOP_SIZE = 2048
SPEECH_BAND_LOW_HZ = 300.0
SPEECH_BAND_HIGH_HZ = 4000.0

# Channel selector: an index, or "mix" for the mean of all channels
ChannelSpec = Union[int, str, None]

# Report progress every N windows
PROGRESS_INTERVAL = 64


@dataclass(frozen=True)
class SpectralSetup:
    """Precomputed per-run FFT state."""
    window: np.ndarray
    freqs: np.ndarray
    low_start: int
    low_end: int
    high_start: int


@dataclass
class FeatureExtractionResult(TaskResult):
    """Result of feature extraction."""
    features: Tuple[FeaturePoint, ...] = ()
    window_size: int = DEFAULT_WINDOW_SIZE
    hop_size: int = DEFAULT_HOP_SIZE
    sample_rate: float = 0.0

    @property
    def n_windows(self) -> int:
        return len(self.features)

    def to_matrix(self) -> np.ndarray:
        """(n_windows, 6) array: time, rms, low, high, centroid, zcr."""
        if not self.features:
            return np.zeros((0, 6), dtype=np.float64)
        return np.array([
            [f.time, f.rms, f.low_band_energy, f.high_band_energy,
             f.spectral_centroid, f.zero_crossing_rate]
            for f in self.features
        ], dtype=np.float64)

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base['n_windows'] = self.n_windows
        base['window_size'] = self.window_size
        base['hop_size'] = self.hop_size
        return base


class FeatureExtractionTask(BaseTask):
    """
    Extract RMS, zero-crossing rate, spectral centroid and band energies.

    Per window (channel 0 by default, or a mono mix):
    - rms: root-mean-square of the raw samples
    - zero_crossing_rate: sign changes / window size
    - Hann window + real FFT; first W/2 magnitude bins
    - spectral_centroid: magnitude-weighted mean frequency
    - low_band_energy: magnitudes over [300 Hz, 4 kHz)
    - high_band_energy: magnitudes from 4 kHz up

    Usage:
        task = FeatureExtractionTask(window_size=4096, hop_size=2048)
        for point in task.iter_feature_points(source):
            ...
    """

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        hop_size: int = DEFAULT_HOP_SIZE,
        speech_band_low_hz: float = SPEECH_BAND_LOW_HZ,
        speech_band_high_hz: float = SPEECH_BAND_HIGH_HZ,
        channel: ChannelSpec = None,
    ):
        """
        Args:
            window_size: FFT window in frames (power of two)
            hop_size: Frames between window starts
            speech_band_low_hz: Lower edge of the speech band
            speech_band_high_hz: Upper edge of the speech band / start of high band
            channel: Channel index, "mix", or None for channel 0

        Window and hop are validated when a run starts, so a bad setting
        fails that run rather than construction.
        """
        self.window_size = int(window_size)
        self.hop_size = int(hop_size)
        self.speech_band_low_hz = float(speech_band_low_hz)
        self.speech_band_high_hz = float(speech_band_high_hz)
        self.channel = channel

    @classmethod
    def from_config(cls, config) -> "FeatureExtractionTask":
        return cls(
            window_size=config.get('features.window_size', DEFAULT_WINDOW_SIZE),
            hop_size=config.get('features.hop_size', DEFAULT_HOP_SIZE),
            speech_band_low_hz=config.get('features.speech_band_low_hz', SPEECH_BAND_LOW_HZ),
            speech_band_high_hz=config.get('features.speech_band_high_hz', SPEECH_BAND_HIGH_HZ),
            channel=config.get('features.channel'),
        )

    def prepare(self, sample_rate: float) -> SpectralSetup:
        """
        Build the window, bin frequencies and band ranges.

        Raises:
            FFTSetupError: Invalid window/hop or the FFT state cannot be allocated
        """
        if not is_power_of_two(self.window_size):
            raise FFTSetupError(
                f"Window size must be a power of two, got {self.window_size}",
                data={"window_size": self.window_size},
            )
        if self.hop_size <= 0:
            raise FFTSetupError(
                f"Hop size must be positive, got {self.hop_size}",
                data={"hop_size": self.hop_size},
            )
        if sample_rate <= 0:
            raise FFTSetupError(
                f"Sample rate must be positive, got {sample_rate}",
                data={"sample_rate": sample_rate},
            )

        try:
            window = hann_window(self.window_size)
            freqs = fft_bin_frequencies(self.window_size, sample_rate)
        except (MemoryError, ValueError) as e:
            raise FFTSetupError(
                "Failed to allocate FFT state",
                data={"window_size": self.window_size},
                cause=e,
            ) from e

        low_start, low_end = band_bin_range(
            self.speech_band_low_hz, self.speech_band_high_hz, sample_rate, self.window_size
        )
        return SpectralSetup(
            window=window,
            freqs=freqs,
            low_start=low_start,
            low_end=low_end,
            high_start=low_end,
        )

    def _select_channel(self, frames: np.ndarray) -> np.ndarray:
        if self.channel == "mix":
            return frames.mean(axis=1)
        index = 0 if self.channel is None else int(self.channel)
        return frames[:, index]

    def _validate_channel(self, source: PCMSource) -> None:
        if self.channel is None or self.channel == "mix":
            return
        if isinstance(self.channel, str) or not 0 <= int(self.channel) < source.channel_count:
            raise ConfigurationError(
                f"Invalid analysis channel: {self.channel!r}",
                data={"channel": self.channel, "channel_count": source.channel_count},
            )

    def compute_point(self, samples: np.ndarray, time: float, setup: SpectralSetup) -> FeaturePoint:
        """Features of one mono window of window_size samples."""
        magnitudes = compute_magnitude_spectrum(samples, setup.window)
        return FeaturePoint(
            time=time,
            rms=float(compute_rms(samples)),
            low_band_energy=float(compute_band_energy(magnitudes, setup.low_start, setup.low_end)),
            high_band_energy=float(compute_band_energy(magnitudes, setup.high_start)),
            spectral_centroid=float(compute_spectral_centroid(magnitudes, setup.freqs)),
            zero_crossing_rate=float(compute_zero_crossing_rate(samples)),
        )

    def window_count(self, total_frames: int) -> int:
        """Number of full windows that fit in total_frames."""
        if self.hop_size <= 0 or total_frames < self.window_size:
            return 0
        return (total_frames - self.window_size) // self.hop_size + 1

    def iter_feature_points(
        self,
        source: PCMSource,
        cancel_token: Optional[CancellationToken] = None,
        context: Optional[AudioContext] = None,
    ) -> Iterator[FeaturePoint]:
        """
        Yield one FeaturePoint per full window, in time order.

        The cancellation token is checked before every window.

        Raises:
            FFTSetupError: On invalid setup (raised on first iteration)
            FeatureExtractionError: When the source fails to deliver a window
            AnalysisCancelled: When the token is cancelled
        """
        setup = self.prepare(source.sample_rate)
        if source.is_empty:
            return
        self._validate_channel(source)

        n_windows = self.window_count(source.total_frame_count)
        sr = source.sample_rate

        for i in range(n_windows):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            start = i * self.hop_size
            try:
                frames = source.read(start, self.window_size)
            except (RuntimeError, OSError) as e:
                raise FeatureExtractionError(
                    f"Failed to read analysis window {i}",
                    data={"window": i, "start_frame": start, "source": getattr(source, 'name', None)},
                    cause=e,
                ) from e
            if frames.shape[0] < self.window_size:
                break

            yield self.compute_point(self._select_channel(frames), start / sr, setup)

            if context is not None and (i + 1) % PROGRESS_INTERVAL == 0:
                context.report_progress(
                    "features", (i + 1) / n_windows, "Extracting features"
                )

    def execute(self, context: AudioContext) -> FeatureExtractionResult:
        source = context.source
        features = tuple(
            self.iter_feature_points(source, cancel_token=context.cancel_token, context=context)
        )

        logger.debug(
            f"Extracted {len(features)} feature points",
            data={"window_size": self.window_size, "hop_size": self.hop_size},
        )

        return FeatureExtractionResult(
            success=True,
            task_name=self.name,
            processing_time_sec=0.0,
            features=features,
            window_size=self.window_size,
            hop_size=self.hop_size,
            sample_rate=source.sample_rate,
        )
