"""
Waveform Task - reduce a PCM source to a fixed number of (min, max) pairs.

Two variants produce identical output:
- in-memory: minmax_buckets() over a materialized buffer
- streaming: fixed-size chunks through StreamingMinMaxReducer, never
  holding more than one chunk of the file
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from .base import AudioContext, TaskResult, BaseTask
from ....common.logging import get_logger
from ....common.primitives import minmax_buckets, StreamingMinMaxReducer
from ....core.models import WaveformSample

logger = get_logger(__name__)

DEFAULT_TARGET_SAMPLE_COUNT = 1000
DEFAULT_CHUNK_SIZE = 8192


def _to_samples(mins: np.ndarray, maxs: np.ndarray) -> List[WaveformSample]:
    return [WaveformSample(float(lo), float(hi)) for lo, hi in zip(mins, maxs)]


def downsample_buffer(buffer: np.ndarray, target_sample_count: int) -> List[WaveformSample]:
    """
    Downsample an in-memory PCM buffer.

    Args:
        buffer: (frames,) or (frames, channels) samples
        target_sample_count: Requested number of waveform samples

    Returns:
        Waveform samples; empty for empty input
    """
    mins, maxs = minmax_buckets(buffer, target_sample_count)
    return _to_samples(mins, maxs)


@dataclass
class WaveformResult(TaskResult):
    """Result of waveform downsampling."""
    samples: Tuple[WaveformSample, ...] = ()
    samples_per_pixel: int = 0

    @property
    def n_samples(self) -> int:
        return len(self.samples)

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """(mins, maxs) arrays for plotting."""
        mins = np.array([s.min for s in self.samples], dtype=np.float32)
        maxs = np.array([s.max for s in self.samples], dtype=np.float32)
        return mins, maxs

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base['n_samples'] = self.n_samples
        base['samples_per_pixel'] = self.samples_per_pixel
        return base


class WaveformTask(BaseTask):
    """
    Downsample the context's source for waveform display.

    Every bucket covers samples_per_pixel = max(1, frames // target) frames
    and keeps the min and max across all channels.

    Usage:
        task = WaveformTask(target_sample_count=1000)
        result = task.execute(context)
        mins, maxs = result.to_arrays()
    """

    def __init__(
        self,
        target_sample_count: int = DEFAULT_TARGET_SAMPLE_COUNT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        streaming: bool = True,
    ):
        """
        Args:
            target_sample_count: Number of (min, max) pairs to produce
            chunk_size: Frames per read in streaming mode
            streaming: Read the source chunk by chunk instead of all at once
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.target_sample_count = max(0, int(target_sample_count))
        self.chunk_size = int(chunk_size)
        self.streaming = streaming

    @classmethod
    def from_config(cls, config) -> "WaveformTask":
        return cls(
            target_sample_count=config.get('waveform.target_sample_count', DEFAULT_TARGET_SAMPLE_COUNT),
            chunk_size=config.get('audio.chunk_size', DEFAULT_CHUNK_SIZE),
        )

    def execute(self, context: AudioContext) -> WaveformResult:
        source = context.source
        total = source.total_frame_count

        if self.streaming:
            samples, spp = self._reduce_streaming(context)
        else:
            context.check_cancelled()
            buffer = source.read_all()
            samples = downsample_buffer(buffer, self.target_sample_count)
            spp = max(1, total // self.target_sample_count) if samples else 0

        logger.debug(
            f"Waveform: {len(samples)} samples from {total} frames",
            data={"samples_per_pixel": spp, "streaming": self.streaming},
        )

        return WaveformResult(
            success=True,
            task_name=self.name,
            processing_time_sec=0.0,
            samples=tuple(samples),
            samples_per_pixel=spp,
        )

    def _reduce_streaming(self, context: AudioContext) -> Tuple[List[WaveformSample], int]:
        source = context.source
        reducer = StreamingMinMaxReducer(source.total_frame_count, self.target_sample_count)
        if reducer.bucket_count == 0:
            return [], 0

        for start, chunk in source.iter_chunks(self.chunk_size):
            context.check_cancelled()
            reducer.feed(chunk)
            if reducer.is_complete:
                break
            context.report_progress(
                "waveform",
                (start + chunk.shape[0]) / source.total_frame_count,
                "Downsampling waveform",
            )

        mins, maxs = reducer.finish()
        return _to_samples(mins, maxs), reducer.samples_per_pixel
