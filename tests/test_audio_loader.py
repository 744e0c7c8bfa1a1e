"""
Tests for PCM sources and AudioLoader.
"""

import numpy as np
import pytest

from rehearsal_link.core.audio import ArrayPCMSource, AudioLoader, SoundFilePCMSource
from rehearsal_link.core.config import Config
from rehearsal_link.core.errors import AudioLoadError


# =============================================================================
# In-memory Source
# =============================================================================

@pytest.mark.unit
class TestArrayPCMSource:
    """Tests for ArrayPCMSource reads."""

    def test_shape_and_duration(self, stereo_source):
        assert stereo_source.channel_count == 2
        assert stereo_source.total_frame_count == 10000
        assert stereo_source.duration_sec == pytest.approx(1.25)

    def test_mono_becomes_one_channel(self):
        source = ArrayPCMSource(np.zeros(100, dtype=np.float32), 8000)
        assert source.read(0, 10).shape == (10, 1)

    def test_read_truncates_at_end(self, stereo_source):
        assert stereo_source.read(9990, 100).shape == (10, 2)

    def test_read_past_end_is_empty(self, stereo_source):
        assert stereo_source.read(20000, 100).shape == (0, 2)

    def test_iter_chunks_covers_source(self, stereo_source):
        chunks = list(stereo_source.iter_chunks(3000))
        assert [start for start, _ in chunks] == [0, 3000, 6000, 9000]
        assert sum(chunk.shape[0] for _, chunk in chunks) == 10000

    def test_read_returns_copy(self, stereo_source):
        chunk = stereo_source.read(0, 10)
        chunk[:] = 9.0
        assert stereo_source.read(0, 1)[0, 0] == pytest.approx(-0.5)

    def test_invalid_sample_rate(self):
        with pytest.raises(ValueError):
            ArrayPCMSource(np.zeros(10, dtype=np.float32), 0)

    def test_empty(self):
        source = ArrayPCMSource(np.zeros(0, dtype=np.float32), 44100)
        assert source.is_empty
        assert source.duration_sec == 0.0


# =============================================================================
# Files
# =============================================================================

@pytest.mark.unit
class TestAudioLoader:
    """Tests for AudioLoader.open() on WAV files."""

    def test_open_wav_streams_from_disk(self, wav_file):
        source = AudioLoader().open(str(wav_file))
        try:
            assert isinstance(source, SoundFilePCMSource)
            assert source.sample_rate == 16000
            assert source.channel_count == 1
            assert source.duration_sec == pytest.approx(10.0)
            assert source.name == "take.wav"
        finally:
            source.close()

    def test_file_matches_buffer(self, wav_file, silence_then_tone):
        """16-bit quantization aside, reads match the original samples."""
        with SoundFilePCMSource(str(wav_file)) as source:
            chunk = source.read(64000, 500)
        expected = silence_then_tone.read(64000, 500)
        np.testing.assert_allclose(chunk, expected, atol=1e-4)

    def test_read_past_end(self, wav_file):
        with SoundFilePCMSource(str(wav_file)) as source:
            assert source.read(159990, 100).shape == (10, 1)
            assert source.read(200000, 100).shape == (0, 1)

    def test_read_after_close(self, wav_file):
        source = SoundFilePCMSource(str(wav_file))
        source.close()
        with pytest.raises(AudioLoadError):
            source.read(0, 10)

    def test_missing_file(self, tmp_path):
        with pytest.raises(AudioLoadError):
            AudioLoader().open(str(tmp_path / "missing.wav"))

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        with pytest.raises(AudioLoadError) as exc_info:
            AudioLoader().open(str(path))
        assert exc_info.value.data["suffix"] == ".txt"

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"RIFF\x00\x00garbage")
        with pytest.raises(AudioLoadError):
            AudioLoader().open(str(path))

    def test_supported_formats_from_config(self, wav_file):
        config = Config()
        config.set('audio.supported_formats', ['.flac'])
        loader = AudioLoader.from_config(config)

        assert loader.is_supported_format("a.FLAC")
        assert not loader.is_supported_format(str(wav_file))

    def test_get_duration(self, wav_file):
        assert AudioLoader().get_duration(str(wav_file)) == pytest.approx(10.0)

    def test_get_duration_missing(self, tmp_path):
        with pytest.raises(AudioLoadError):
            AudioLoader().get_duration(str(tmp_path / "missing.wav"))
