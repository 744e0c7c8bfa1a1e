"""
Pytest configuration for rehearsal-link tests.

Automatically adds project root to sys.path so that 'from rehearsal_link...'
imports work without installing the package.
Defines markers and shared fixtures.
"""
import sys
import numpy as np
import pytest
from pathlib import Path
from typing import List, Tuple

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rehearsal_link.core.audio import ArrayPCMSource
from rehearsal_link.core.models import FeaturePoint, Segment, SegmentType


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "invariant: Segment list invariant tests")
    config.addinivalue_line("markers", "integration: End-to-end pipeline tests on synthetic audio")


# =============================================================================
# Helpers
# =============================================================================

def make_point(time, rms, low=0.0, high=0.0, centroid=0.0, zcr=0.0) -> FeaturePoint:
    """Build a FeaturePoint with keyword-light positional arguments."""
    return FeaturePoint(
        time=time,
        rms=rms,
        low_band_energy=low,
        high_band_energy=high,
        spectral_centroid=centroid,
        zero_crossing_rate=zcr,
    )


def make_segments(bounds: List[Tuple[float, float, SegmentType]]) -> Tuple[Segment, ...]:
    """Contiguous segments from (start, end, type) triples."""
    return tuple(Segment(start, end, seg_type) for start, end, seg_type in bounds)


def assert_contiguous(segments, total_duration=None, tol=1e-9):
    """Ordered, gapless, positive durations, optional full coverage."""
    assert len(segments) > 0
    for seg in segments:
        assert seg.end_time > seg.start_time
    for prev, nxt in zip(segments, segments[1:]):
        assert abs(prev.end_time - nxt.start_time) <= tol
    if total_duration is not None:
        assert abs(segments[0].start_time) <= tol
        assert abs(segments[-1].end_time - total_duration) <= tol


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return project root path."""
    return PROJECT_ROOT


@pytest.fixture
def scenario_features() -> List[FeaturePoint]:
    """
    Silence (t=0..4), performance (t=4.1..8), conversation (t=8.1..12).

    Conversation points sit between the silence and performance RMS
    thresholds with a speech-heavy spectrum.
    """
    silence = [make_point(t, 0.0001) for t in (0.0, 1.0, 2.0, 3.0, 4.0)]
    performance = [
        make_point(t, 0.1, low=1, high=10, centroid=6000, zcr=0.4)
        for t in (4.1, 5.0, 6.0, 7.0, 8.0)
    ]
    conversation = [
        make_point(t, 0.005, low=10, high=1, centroid=1500, zcr=0.1)
        for t in (8.1, 9.0, 10.0, 11.0, 12.0)
    ]
    return silence + performance + conversation


@pytest.fixture
def ten_second_segment() -> Tuple[Segment, ...]:
    """A single performance segment [0, 10)."""
    return (Segment(0.0, 10.0, SegmentType.PERFORMANCE, label="Take 1", transcription="intro"),)


@pytest.fixture
def three_segments() -> Tuple[Segment, ...]:
    """Silence [0, 4), performance [4, 8), conversation [8, 12)."""
    return make_segments([
        (0.0, 4.0, SegmentType.SILENCE),
        (4.0, 8.0, SegmentType.PERFORMANCE),
        (8.0, 12.0, SegmentType.CONVERSATION),
    ])


@pytest.fixture
def stereo_source() -> ArrayPCMSource:
    """Stereo ramp, 10 000 frames at 8 kHz; right channel is the negated left."""
    sr = 8000
    left = np.linspace(-0.5, 0.5, 10000, dtype=np.float32)
    return ArrayPCMSource(np.stack([left, -left], axis=1), sr, name="ramp.wav")


@pytest.fixture
def silence_then_tone() -> ArrayPCMSource:
    """
    4 s of digital silence followed by 6 s of a 440 Hz tone (amplitude 0.5),
    16 kHz mono.
    """
    sr = 16000
    silence = np.zeros(4 * sr, dtype=np.float32)
    t = np.arange(6 * sr, dtype=np.float32) / sr
    tone = (0.5 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)
    return ArrayPCMSource(np.concatenate([silence, tone]), sr, name="silence_then_tone.wav")


@pytest.fixture
def synthetic_audio_short() -> Tuple[np.ndarray, int]:
    """Create short synthetic audio (2 seconds)."""
    np.random.seed(42)
    sr = 22050
    duration = 2.0
    t = np.linspace(0, duration, int(sr * duration), dtype=np.float32)

    y = (
        0.5 * np.sin(2 * np.pi * 440 * t) +
        0.3 * np.sin(2 * np.pi * 880 * t) +
        0.1 * np.random.randn(len(t))
    ).astype(np.float32)

    return y, sr


@pytest.fixture
def wav_file(tmp_path, silence_then_tone) -> Path:
    """silence_then_tone written to a 16-bit WAV file."""
    import soundfile as sf

    path = tmp_path / "take.wav"
    sf.write(str(path), silence_then_tone.read_all(), int(silence_then_tone.sample_rate), subtype='PCM_16')
    return path
