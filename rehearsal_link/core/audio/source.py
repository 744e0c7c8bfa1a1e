"""
PCM sources - the audio boundary of the analysis pipeline.

Every source exposes sample rate, channel count, total frame count and
random-access reads of frame ranges as (frames, channels) float32 arrays.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Tuple

import numpy as np
import soundfile as sf

from ...common.primitives import as_frames
from ..errors import AudioLoadError


class PCMSource(ABC):
    """Readable PCM stream of known length."""

    @property
    @abstractmethod
    def sample_rate(self) -> float:
        """Frames per second."""

    @property
    @abstractmethod
    def channel_count(self) -> int:
        """Number of interleaved channels."""

    @property
    @abstractmethod
    def total_frame_count(self) -> int:
        """Total number of frames."""

    @abstractmethod
    def read(self, start_frame: int, frame_count: int) -> np.ndarray:
        """
        Read a frame range.

        Ranges running past the end are truncated; ranges starting at or
        past the end return an empty (0, channels) array.

        Returns:
            (frames, channels) float32 array
        """

    @property
    def duration_sec(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.total_frame_count / float(self.sample_rate)

    @property
    def is_empty(self) -> bool:
        return self.total_frame_count <= 0 or self.channel_count <= 0

    def iter_chunks(self, chunk_size: int = 8192) -> Iterator[Tuple[int, np.ndarray]]:
        """
        Yield (start_frame, chunk) pairs covering the whole source in order.

        Args:
            chunk_size: Frames per read
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        position = 0
        total = self.total_frame_count
        while position < total:
            chunk = self.read(position, min(chunk_size, total - position))
            if chunk.shape[0] == 0:
                break
            yield position, chunk
            position += chunk.shape[0]

    def read_all(self) -> np.ndarray:
        """Materialize the whole source (frames, channels)."""
        return self.read(0, self.total_frame_count)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(sr={self.sample_rate}, "
            f"channels={self.channel_count}, frames={self.total_frame_count})"
        )


class ArrayPCMSource(PCMSource):
    """
    In-memory PCM buffer.

    Args:
        samples: (frames,) mono or (frames, channels) samples
        sample_rate: Frames per second
        name: Optional display name (file name for loaded audio)
    """

    def __init__(self, samples: np.ndarray, sample_rate: float, name: str = "buffer"):
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self._samples = np.ascontiguousarray(as_frames(samples), dtype=np.float32)
        self._sample_rate = float(sample_rate)
        self.name = name

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def channel_count(self) -> int:
        return self._samples.shape[1]

    @property
    def total_frame_count(self) -> int:
        return self._samples.shape[0]

    @property
    def samples(self) -> np.ndarray:
        """Underlying (frames, channels) buffer, read-only view."""
        view = self._samples.view()
        view.flags.writeable = False
        return view

    def read(self, start_frame: int, frame_count: int) -> np.ndarray:
        start = max(0, int(start_frame))
        stop = min(self.total_frame_count, start + max(0, int(frame_count)))
        if stop <= start:
            return np.zeros((0, self.channel_count), dtype=np.float32)
        return self._samples[start:stop].copy()


class SoundFilePCMSource(PCMSource):
    """
    Streaming reads from an audio file through soundfile.

    The file stays open until close(); seek+read pairs are serialized by
    a lock so the source can be shared by the downsampler and the feature
    extractor.

    Usage:
        with SoundFilePCMSource("take1.wav") as source:
            chunk = source.read(0, 8192)
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.name = self.path.name
        try:
            self._file = sf.SoundFile(str(self.path), mode='r')
        except (RuntimeError, OSError) as e:
            raise AudioLoadError(
                f"Failed to open audio file: {self.path.name}",
                data={"path": str(self.path)},
                cause=e,
            ) from e
        self._lock = threading.Lock()

    @property
    def sample_rate(self) -> float:
        return float(self._file.samplerate)

    @property
    def channel_count(self) -> int:
        return int(self._file.channels)

    @property
    def total_frame_count(self) -> int:
        return int(self._file.frames)

    def read(self, start_frame: int, frame_count: int) -> np.ndarray:
        start = max(0, int(start_frame))
        count = min(max(0, int(frame_count)), self.total_frame_count - start)
        if count <= 0:
            return np.zeros((0, self.channel_count), dtype=np.float32)

        with self._lock:
            if self._file.closed:
                raise AudioLoadError(
                    f"Audio file already closed: {self.name}",
                    data={"path": str(self.path)},
                )
            self._file.seek(start)
            data = self._file.read(count, dtype='float32', always_2d=True)
        return np.ascontiguousarray(data)

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()

    def __enter__(self) -> "SoundFilePCMSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
