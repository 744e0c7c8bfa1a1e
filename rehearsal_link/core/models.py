"""Data structures shared across the analysis pipeline and segment editing."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class SegmentType(str, Enum):
    """Semantic region types of a rehearsal recording."""
    PERFORMANCE = "performance"
    CONVERSATION = "conversation"
    SILENCE = "silence"

    def __str__(self):
        return self.value

    @property
    def display_name(self):
        """Get display name for type."""
        name_map = {
            SegmentType.PERFORMANCE: "Performance",
            SegmentType.CONVERSATION: "Conversation",
            SegmentType.SILENCE: "Silence",
        }
        return name_map[self]


def new_segment_id() -> str:
    """Allocate a fresh segment identity."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class WaveformSample:
    """Min/max amplitude of one visual pixel column."""
    min: float
    max: float


@dataclass(frozen=True)
class FeaturePoint:
    """
    Features of one analysis window.

    Attributes:
        time: Window start offset in seconds
        rms: Root-mean-square of the raw window samples
        low_band_energy: Magnitude sum over 300 Hz - 4 kHz (speech band)
        high_band_energy: Magnitude sum above 4 kHz
        spectral_centroid: Magnitude-weighted mean frequency in Hz
        zero_crossing_rate: Sign changes per sample, 0-1
    """
    time: float
    rms: float
    low_band_energy: float
    high_band_energy: float
    spectral_centroid: float
    zero_crossing_rate: float

    @property
    def speech_ratio(self) -> float:
        """Share of speech-band energy in the low+high total."""
        return self.low_band_energy / (self.low_band_energy + self.high_band_energy + 1e-6)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'rms': self.rms,
            'low_band_energy': self.low_band_energy,
            'high_band_energy': self.high_band_energy,
            'spectral_centroid': self.spectral_centroid,
            'zero_crossing_rate': self.zero_crossing_rate,
        }


@dataclass(frozen=True)
class RawSegment:
    """Classifier run before smoothing; has no identity yet."""
    start_time: float
    end_time: float
    type: SegmentType

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class Segment:
    """
    A time range of the recording with one semantic type.

    Segments are immutable; edits produce new instances via
    dataclasses.replace(), keeping `id` unless the edit destroys
    the segment.
    """
    start_time: float
    end_time: float
    type: SegmentType
    id: str = field(default_factory=new_segment_id)
    label: Optional[str] = None
    transcription: Optional[str] = None
    excluded_from_export: bool = False

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, time: float) -> bool:
        """True when time lies strictly inside the segment."""
        return self.start_time < time < self.end_time

    def __str__(self):
        return f"{self.type.display_name} [{self.start_time:.2f}s - {self.end_time:.2f}s]"
