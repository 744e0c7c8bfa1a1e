"""Audio file loading and validation."""

import librosa
import numpy as np
import soundfile as sf
from pathlib import Path
from typing import Iterable, Optional

from ...common.logging import get_logger
from ..errors import AudioLoadError
from .source import ArrayPCMSource, PCMSource, SoundFilePCMSource

logger = get_logger(__name__)


class AudioLoader:
    """Opens rehearsal recordings as PCM sources with validation."""

    SUPPORTED_FORMATS = {'.wav', '.flac', '.aiff', '.aif', '.ogg', '.mp3', '.m4a'}

    def __init__(self, supported_formats: Optional[Iterable[str]] = None):
        """
        Initialize audio loader.

        Args:
            supported_formats: File extensions to accept (defaults to SUPPORTED_FORMATS)
        """
        if supported_formats is not None:
            self.supported_formats = {ext.lower() for ext in supported_formats}
        else:
            self.supported_formats = set(self.SUPPORTED_FORMATS)

    @classmethod
    def from_config(cls, config) -> "AudioLoader":
        return cls(supported_formats=config.get('audio.supported_formats'))

    def is_supported_format(self, file_path: str) -> bool:
        """
        Check if file format is supported.

        Args:
            file_path: Path to audio file

        Returns:
            True if format is supported
        """
        return Path(file_path).suffix.lower() in self.supported_formats

    def open(self, file_path: str) -> PCMSource:
        """
        Open an audio file for analysis.

        Formats libsndfile can read are streamed from disk. Anything else
        (mp3/m4a on older libsndfile builds) is decoded into memory with
        librosa at the native sample rate, keeping all channels.

        Args:
            file_path: Path to audio file

        Returns:
            PCMSource for the file

        Raises:
            AudioLoadError: If the file is missing, unsupported or unreadable
        """
        path = Path(file_path).expanduser()

        if not path.exists():
            raise AudioLoadError(
                f"Audio file not found: {path}",
                data={"path": str(path)},
            )

        if not self.is_supported_format(str(path)):
            raise AudioLoadError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {', '.join(sorted(self.supported_formats))}",
                data={"path": str(path), "suffix": path.suffix},
            )

        logger.info(f"Loading audio: {path.name}")

        if self._soundfile_can_read(path):
            source = SoundFilePCMSource(str(path))
        else:
            source = self._decode_with_librosa(path)

        logger.info(
            f"Loaded {path.name}: {source.duration_sec:.2f}s, "
            f"{source.sample_rate:.0f}Hz, {source.channel_count}ch",
            data={
                "frames": source.total_frame_count,
                "streaming": isinstance(source, SoundFilePCMSource),
            },
        )
        return source

    @staticmethod
    def _soundfile_can_read(path: Path) -> bool:
        try:
            sf.info(str(path))
            return True
        except (RuntimeError, OSError):
            return False

    def _decode_with_librosa(self, path: Path) -> ArrayPCMSource:
        try:
            y, sr = librosa.load(str(path), sr=None, mono=False)
        except Exception as e:
            raise AudioLoadError(
                f"Failed to load audio file: {path.name}",
                data={"path": str(path)},
                cause=e,
            ) from e

        # librosa returns (channels, samples) for multichannel input
        samples = y.T if y.ndim > 1 else y
        return ArrayPCMSource(np.asarray(samples, dtype=np.float32), sr, name=path.name)

    def get_duration(self, file_path: str) -> float:
        """
        Get audio file duration without decoding the file.

        Raises:
            AudioLoadError: If duration cannot be determined
        """
        path = Path(file_path).expanduser()
        if not path.exists():
            raise AudioLoadError(f"Audio file not found: {path}", data={"path": str(path)})

        try:
            return float(sf.info(str(path)).duration)
        except (RuntimeError, OSError):
            try:
                return float(librosa.get_duration(path=str(path)))
            except Exception as e:
                raise AudioLoadError(
                    f"Failed to get audio duration: {path.name}",
                    data={"path": str(path)},
                    cause=e,
                ) from e
