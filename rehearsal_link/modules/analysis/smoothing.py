"""Minimum-duration smoothing of classifier runs."""

from typing import Sequence, Tuple

from ...common.logging import get_logger
from ...core.models import RawSegment, Segment

logger = get_logger(__name__)

DEFAULT_MIN_DURATION = 3.0


class SegmentSmoother:
    """
    Absorb short runs into their neighbours and coalesce same-type runs.

    Single left-to-right pass with a `current` accumulator:
        - next is short    -> current grows to next.end, keeps its type
        - current is short -> current grows to next.end, takes next's type
        - same type        -> current grows to next.end
        - otherwise        -> commit current, current = next

    Forward absorption wins over backward: a short run between two long
    runs of different types joins its predecessor. Every output segment
    gets a fresh id.
    """

    def __init__(self, min_duration: float = DEFAULT_MIN_DURATION):
        self.min_duration = float(min_duration)

    @classmethod
    def from_config(cls, config) -> 'SegmentSmoother':
        return cls(min_duration=config.get('smoothing.min_duration', DEFAULT_MIN_DURATION))

    def is_short(self, segment: RawSegment) -> bool:
        return segment.duration < self.min_duration

    def smooth(self, raw: Sequence[RawSegment]) -> Tuple[Segment, ...]:
        if not raw:
            return ()

        committed = []
        current = raw[0]

        for nxt in raw[1:]:
            if self.is_short(nxt):
                current = RawSegment(current.start_time, nxt.end_time, current.type)
            elif self.is_short(current):
                current = RawSegment(current.start_time, nxt.end_time, nxt.type)
            elif current.type == nxt.type:
                current = RawSegment(current.start_time, nxt.end_time, current.type)
            else:
                committed.append(current)
                current = nxt
        committed.append(current)

        logger.debug(
            f"Smoothed {len(raw)} runs into {len(committed)} segments",
            data={"min_duration": self.min_duration},
        )
        return tuple(Segment(r.start_time, r.end_time, r.type) for r in committed)

    def resmooth(self, segments: Sequence[Segment]) -> Tuple[Segment, ...]:
        """Smooth an already-final segment list (ids are not preserved)."""
        return self.smooth([RawSegment(s.start_time, s.end_time, s.type) for s in segments])
