"""
Waveform Primitives - min/max reduction for visual waveforms.

Every bucket of `samples_per_pixel` frames becomes one (min, max) pair.
Extrema are taken across all channels; channels are never averaged.

All functions are pure numpy operations.
"""

import numpy as np
from typing import List, Tuple


def as_frames(buffer: np.ndarray) -> np.ndarray:
    """
    View a PCM buffer as (frames, channels).

    1-D input is treated as mono.
    """
    buffer = np.asarray(buffer, dtype=np.float32)
    if buffer.ndim == 1:
        return buffer[:, np.newaxis]
    if buffer.ndim != 2:
        raise ValueError(f"PCM buffer must be 1-D or 2-D, got shape {buffer.shape}")
    return buffer


def bucket_layout(total_frames: int, target_sample_count: int) -> Tuple[int, int]:
    """
    Compute bucket geometry.

    Args:
        total_frames: Number of frames in the source
        target_sample_count: Requested number of waveform samples

    Returns:
        (samples_per_pixel, bucket_count). bucket_count is 0 for empty input.
        Frames past bucket_count * samples_per_pixel are not covered.
    """
    if total_frames <= 0 or target_sample_count <= 0:
        return 0, 0

    samples_per_pixel = max(1, total_frames // target_sample_count)
    bucket_count = min(target_sample_count, -(-total_frames // samples_per_pixel))
    return samples_per_pixel, bucket_count


def minmax_buckets(buffer: np.ndarray, target_sample_count: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Reduce an in-memory buffer to per-bucket minima and maxima.

    Args:
        buffer: PCM samples, (frames,) or (frames, channels)
        target_sample_count: Requested number of buckets

    Returns:
        Tuple of (mins, maxs), each of shape (bucket_count,)
    """
    frames = as_frames(buffer)
    samples_per_pixel, bucket_count = bucket_layout(frames.shape[0], target_sample_count)
    if bucket_count == 0:
        empty = np.zeros(0, dtype=np.float32)
        return empty, empty.copy()

    usable = frames[: bucket_count * samples_per_pixel]
    blocks = usable.reshape(bucket_count, samples_per_pixel * frames.shape[1])
    return blocks.min(axis=1), blocks.max(axis=1)


class StreamingMinMaxReducer:
    """
    Incremental min/max reduction over sequential PCM chunks.

    Tracks the current bucket's extrema across chunk boundaries so that
    a file never needs to be fully materialized. Feeding the chunks of a
    buffer yields exactly what minmax_buckets() yields for the whole buffer.

    Usage:
        reducer = StreamingMinMaxReducer(total_frames, 1000)
        for chunk in chunks:
            reducer.feed(chunk)
        mins, maxs = reducer.finish()
    """

    def __init__(self, total_frames: int, target_sample_count: int):
        self.samples_per_pixel, self.bucket_count = bucket_layout(
            total_frames, target_sample_count
        )
        self._limit = self.samples_per_pixel * self.bucket_count
        self._position = 0
        self._current_bucket = -1
        self._current_min = 0.0
        self._current_max = 0.0
        self._mins: List[float] = []
        self._maxs: List[float] = []

    @property
    def is_complete(self) -> bool:
        """True once every covered frame has been consumed."""
        return self._position >= self._limit

    def feed(self, chunk: np.ndarray) -> None:
        """Consume the next chunk of frames, in file order."""
        frames = as_frames(chunk)
        start = self._position
        self._position += frames.shape[0]
        end = min(self._position, self._limit)
        if end <= start:
            return

        block = frames[: end - start]
        frame_min = block.min(axis=1)
        frame_max = block.max(axis=1)

        buckets = np.arange(start, end) // self.samples_per_pixel
        group_starts = np.concatenate(([0], np.flatnonzero(np.diff(buckets)) + 1))
        group_mins = np.minimum.reduceat(frame_min, group_starts)
        group_maxs = np.maximum.reduceat(frame_max, group_starts)

        for bucket, lo, hi in zip(buckets[group_starts], group_mins, group_maxs):
            if bucket == self._current_bucket:
                self._current_min = min(self._current_min, float(lo))
                self._current_max = max(self._current_max, float(hi))
                continue
            self._flush()
            self._current_bucket = int(bucket)
            self._current_min = float(lo)
            self._current_max = float(hi)

    def _flush(self) -> None:
        if self._current_bucket >= 0:
            self._mins.append(self._current_min)
            self._maxs.append(self._current_max)
            self._current_bucket = -1

    def finish(self) -> Tuple[np.ndarray, np.ndarray]:
        """Close the open bucket and return (mins, maxs)."""
        self._flush()
        return (
            np.asarray(self._mins, dtype=np.float32),
            np.asarray(self._maxs, dtype=np.float32),
        )
