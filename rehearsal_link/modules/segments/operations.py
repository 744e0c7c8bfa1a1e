"""
Invariant-preserving segment edits.

Every operation takes an ordered, contiguous tuple of segments and returns
a new tuple. Unknown ids, out-of-range indices and rejected times return
the input tuple itself, so callers can detect a no-op with `is`.
"""

import math
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from ...common.logging import get_logger
from ...core.errors import SegmentInvariantError
from ...core.models import Segment, SegmentType

logger = get_logger(__name__)

# Minimum fragment length for splits and boundary moves, in seconds
MIN_SEGMENT_DURATION = 0.1

# Float slack for contiguity/coverage checks
TIME_TOLERANCE = 1e-6

Segments = Tuple[Segment, ...]


def find_index(segments: Sequence[Segment], segment_id: str) -> Optional[int]:
    """Position of the segment with this id, or None."""
    for i, segment in enumerate(segments):
        if segment.id == segment_id:
            return i
    return None


def segment_at(segments: Sequence[Segment], time: float) -> Optional[Segment]:
    """Segment covering time (start inclusive, end exclusive)."""
    for segment in segments:
        if segment.start_time <= time < segment.end_time:
            return segment
    return None


def _replace_field(segments: Segments, segment_id: str, **changes) -> Segments:
    index = find_index(segments, segment_id)
    if index is None:
        return segments
    updated = replace(segments[index], **changes)
    return segments[:index] + (updated,) + segments[index + 1:]


def update_type(segments: Segments, segment_id: str, segment_type: SegmentType) -> Segments:
    return _replace_field(segments, segment_id, type=SegmentType(segment_type))


def update_label(segments: Segments, segment_id: str, label: Optional[str]) -> Segments:
    """Set the label; an empty string clears it."""
    return _replace_field(segments, segment_id, label=label or None)


def update_transcription(segments: Segments, segment_id: str, transcription: Optional[str]) -> Segments:
    return _replace_field(segments, segment_id, transcription=transcription)


def update_export_exclusion(segments: Segments, segment_id: str, excluded: bool) -> Segments:
    return _replace_field(segments, segment_id, excluded_from_export=bool(excluded))


def move_boundary(
    segments: Segments,
    index: int,
    new_time: float,
    epsilon: float = MIN_SEGMENT_DURATION,
) -> Segments:
    """
    Move the boundary between segments[index] and segments[index + 1].

    The new time is clamped to [segments[index].start + epsilon,
    segments[index + 1].end - epsilon]. Both segments keep their ids and
    all other fields.

    Args:
        segments: Ordered segments
        index: Left segment of the boundary, 0 <= index < len - 1
        new_time: Requested boundary time in seconds
        epsilon: Minimum length left on either side
    """
    if not 0 <= index < len(segments) - 1 or not math.isfinite(new_time):
        return segments

    left, right = segments[index], segments[index + 1]
    lower = left.start_time + epsilon
    upper = right.end_time - epsilon
    if lower > upper:
        return segments

    clamped = max(lower, min(upper, float(new_time)))
    if clamped == left.end_time:
        return segments

    return (
        segments[:index]
        + (replace(left, end_time=clamped), replace(right, start_time=clamped))
        + segments[index + 2:]
    )


def split_segment(
    segments: Segments,
    at_time: float,
    min_fragment: float = MIN_SEGMENT_DURATION,
) -> Segments:
    """
    Split the segment strictly containing at_time into two.

    Both fragments get fresh ids and keep the type and export flag; label
    and transcription are dropped. Rejected when either fragment would be
    min_fragment seconds or shorter.
    """
    for index, segment in enumerate(segments):
        if not segment.contains(at_time):
            continue
        if at_time - segment.start_time <= min_fragment or segment.end_time - at_time <= min_fragment:
            logger.debug(
                f"Split at {at_time:.3f}s rejected: fragment too short",
                data={"segment_id": segment.id},
            )
            return segments

        first = Segment(
            start_time=segment.start_time,
            end_time=at_time,
            type=segment.type,
            excluded_from_export=segment.excluded_from_export,
        )
        second = Segment(
            start_time=at_time,
            end_time=segment.end_time,
            type=segment.type,
            excluded_from_export=segment.excluded_from_export,
        )
        return segments[:index] + (first, second) + segments[index + 1:]

    return segments


def _join_transcriptions(first: Optional[str], second: Optional[str]) -> Optional[str]:
    if first is not None and second is not None:
        return f"{first}\n{second}"
    return first if first is not None else second


def merge_with_next(segments: Segments, segment_id: str) -> Segments:
    """
    Merge a segment with its successor.

    The result keeps the first segment's id, start, type and export flag
    and takes the successor's end. The label is the first's, else the
    successor's; transcriptions are newline-joined.
    """
    index = find_index(segments, segment_id)
    if index is None or index >= len(segments) - 1:
        return segments

    first, second = segments[index], segments[index + 1]
    merged = replace(
        first,
        end_time=second.end_time,
        label=first.label if first.label is not None else second.label,
        transcription=_join_transcriptions(first.transcription, second.transcription),
    )
    return segments[:index] + (merged,) + segments[index + 2:]


def check_invariants(
    segments: Sequence[Segment],
    total_duration: Optional[float] = None,
    tolerance: float = TIME_TOLERANCE,
) -> None:
    """
    Validate ordering, contiguity, coverage and positive durations.

    Args:
        segments: Segments to check
        total_duration: When given, the list must cover [0, total_duration]
        tolerance: Allowed float drift at boundaries

    Raises:
        SegmentInvariantError: On the first violation found
    """
    if not segments:
        return

    ids = set()
    for i, segment in enumerate(segments):
        if not (math.isfinite(segment.start_time) and math.isfinite(segment.end_time)):
            raise SegmentInvariantError(
                f"Segment {i} has non-finite times",
                data={"index": i, "start": segment.start_time, "end": segment.end_time},
            )
        if segment.end_time <= segment.start_time:
            raise SegmentInvariantError(
                f"Segment {i} has non-positive duration",
                data={"index": i, "start": segment.start_time, "end": segment.end_time},
            )
        if segment.id in ids:
            raise SegmentInvariantError(
                f"Duplicate segment id at index {i}",
                data={"index": i, "segment_id": segment.id},
            )
        ids.add(segment.id)
        if i > 0 and abs(segments[i - 1].end_time - segment.start_time) > tolerance:
            raise SegmentInvariantError(
                f"Segments {i - 1} and {i} are not contiguous",
                data={"index": i, "previous_end": segments[i - 1].end_time,
                      "start": segment.start_time},
            )

    if total_duration is not None:
        if abs(segments[0].start_time) > tolerance or abs(segments[-1].end_time - total_duration) > tolerance:
            raise SegmentInvariantError(
                "Segments do not cover the full recording",
                data={"start": segments[0].start_time, "end": segments[-1].end_time,
                      "duration": total_duration},
            )
