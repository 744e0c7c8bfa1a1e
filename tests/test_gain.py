"""
Unit tests for gain primitives and source normalization.
"""

import numpy as np
import pytest

from rehearsal_link.common.primitives import (
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
from rehearsal_link.core.audio import ArrayPCMSource, normalize_source, normalize_source_from_config
from rehearsal_link.core.config import Config
from rehearsal_link.core.errors import ConfigurationError


@pytest.fixture
def quiet_stereo():
    """Square wave at 0.01 on the left, 0.02 on the right."""
    sign = np.where(np.arange(1000) % 2 == 0, 1.0, -1.0)
    return np.stack([0.01 * sign, 0.02 * sign], axis=1).astype(np.float32)


# =============================================================================
# Primitives
# =============================================================================

@pytest.mark.unit
class TestGainPrimitives:
    """Tests for level measurement and gain computation."""

    def test_db_conversion(self):
        assert db_to_amplitude(0.0) == pytest.approx(1.0)
        assert db_to_amplitude(-20.0) == pytest.approx(0.1)
        assert amplitude_to_db(0.1) == pytest.approx(-20.0)
        assert amplitude_to_db(0.0) == float('-inf')

    def test_levels(self, quiet_stereo):
        assert peak_level(quiet_stereo) == pytest.approx(0.02)
        assert rms_level(quiet_stereo) == pytest.approx(0.015)

    def test_empty_levels(self):
        assert peak_level(np.zeros(0, dtype=np.float32)) == 0.0
        assert rms_level(np.zeros(0, dtype=np.float32)) == 0.0

    def test_peak_normalize(self, quiet_stereo):
        normalized = peak_normalize(quiet_stereo, target_db=-6.0)
        assert peak_level(normalized) == pytest.approx(db_to_amplitude(-6.0), rel=1e-5)

    def test_rms_normalize(self, quiet_stereo):
        """Mean channel RMS reaches the target; the channel ratio is kept."""
        normalized = rms_normalize(quiet_stereo, target_db=-20.0)
        assert rms_level(normalized) == pytest.approx(0.1, rel=1e-5)
        assert normalized[0, 1] / normalized[0, 0] == pytest.approx(2.0)

    def test_rms_gain_capped(self):
        tiny = np.full(100, 1e-5, dtype=np.float32)
        assert rms_gain(tiny, target_db=0.0, max_gain=1000.0) == 1000.0

    def test_silence_untouched(self):
        silence = np.zeros(100, dtype=np.float32)
        assert peak_gain(silence) == 1.0
        assert rms_gain(silence) == 1.0

    def test_input_not_modified(self, quiet_stereo):
        before = quiet_stereo.copy()
        apply_gain(quiet_stereo, 10.0)
        np.testing.assert_array_equal(quiet_stereo, before)


# =============================================================================
# Source Normalization
# =============================================================================

@pytest.mark.unit
class TestNormalizeSource:
    """Tests for normalize_source()."""

    def test_returns_new_source(self, quiet_stereo):
        source = ArrayPCMSource(quiet_stereo, 8000, name="quiet.wav")
        normalized = normalize_source(source, method='peak')

        assert normalized is not source
        assert normalized.sample_rate == 8000
        assert normalized.total_frame_count == source.total_frame_count
        assert peak_level(normalized.read_all()) == pytest.approx(db_to_amplitude(-3.0), rel=1e-5)
        assert peak_level(source.read_all()) == pytest.approx(0.02)

    def test_rms_default_target(self, quiet_stereo):
        normalized = normalize_source(ArrayPCMSource(quiet_stereo, 8000))
        assert rms_level(normalized.read_all()) == pytest.approx(0.1, rel=1e-5)

    def test_unknown_method(self, quiet_stereo):
        with pytest.raises(ConfigurationError):
            normalize_source(ArrayPCMSource(quiet_stereo, 8000), method='lufs')

    def test_from_config(self, quiet_stereo):
        config = Config()
        config.set('normalization.method', 'peak')
        config.set('normalization.peak_target_db', -1.0)

        normalized = normalize_source_from_config(ArrayPCMSource(quiet_stereo, 8000), config)
        assert peak_level(normalized.read_all()) == pytest.approx(db_to_amplitude(-1.0), rel=1e-5)
