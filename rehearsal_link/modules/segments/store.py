"""
SegmentStore - the single owner of the current segment list.

Holds an immutable tuple snapshot and swaps the reference atomically.
Edits and publishes are serialized by one lock, so readers always see a
complete list and an edit never interleaves with a pipeline publish.
"""

import threading
from typing import Callable, List, Optional, Sequence, Tuple

from ...common.logging import get_logger
from ...core.models import Segment, SegmentType
from . import operations as ops

logger = get_logger(__name__)

# Args: (segments, generation)
ChangeListener = Callable[[Tuple[Segment, ...], int], None]


class SegmentStore:
    """
    Owns the segment list of the loaded recording.

    Usage:
        store = SegmentStore()
        store.publish(snapshot.segments, generation=snapshot.generation,
                      duration=snapshot.duration_sec)
        store.split_segment(5.0)
        segments = store.segments
    """

    def __init__(self, min_segment_duration: float = ops.MIN_SEGMENT_DURATION):
        """
        Args:
            min_segment_duration: Smallest fragment a split or boundary move may leave
        """
        self.min_segment_duration = float(min_segment_duration)
        self._lock = threading.RLock()
        self._segments: Tuple[Segment, ...] = ()
        self._generation = -1
        self._duration = 0.0
        self._listeners: List[ChangeListener] = []

    @classmethod
    def from_config(cls, config) -> 'SegmentStore':
        return cls(min_segment_duration=config.get('editing.min_segment_duration', ops.MIN_SEGMENT_DURATION))

    # ---- Reading ----

    @property
    def segments(self) -> Tuple[Segment, ...]:
        """Current snapshot; never a partially built list."""
        return self._segments

    @property
    def generation(self) -> int:
        """Generation of the last published analysis (-1 before the first)."""
        return self._generation

    @property
    def duration(self) -> float:
        return self._duration

    def __len__(self) -> int:
        return len(self._segments)

    def get(self, segment_id: str) -> Optional[Segment]:
        segments = self._segments
        index = ops.find_index(segments, segment_id)
        return None if index is None else segments[index]

    def segment_at(self, time: float) -> Optional[Segment]:
        return ops.segment_at(self._segments, time)

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback run (under the lock) after every change."""
        self._listeners.append(listener)

    # ---- Publishing ----

    def publish(
        self,
        segments: Sequence[Segment],
        generation: int,
        duration: Optional[float] = None,
    ) -> bool:
        """
        Replace the whole list with a pipeline result.

        Results older than the last published generation are dropped.

        Returns:
            True if the list was replaced
        """
        with self._lock:
            if generation < self._generation:
                logger.info(
                    f"Dropping stale segments (generation {generation} < {self._generation})",
                    data={"generation": generation, "current": self._generation},
                )
                return False
            self._segments = tuple(segments)
            self._generation = generation
            if duration is not None:
                self._duration = float(duration)
            elif self._segments:
                self._duration = self._segments[-1].end_time
            self._notify()
            return True

    def clear(self) -> None:
        """Forget all segments (e.g. when new audio is being loaded)."""
        with self._lock:
            self._segments = ()
            self._duration = 0.0
            self._notify()

    # ---- Editing ----

    def _apply(self, operation, *args, **kwargs) -> bool:
        with self._lock:
            updated = operation(self._segments, *args, **kwargs)
            if updated is self._segments:
                return False
            self._segments = updated
            self._notify()
            return True

    def update_type(self, segment_id: str, segment_type: SegmentType) -> bool:
        return self._apply(ops.update_type, segment_id, segment_type)

    def update_label(self, segment_id: str, label: Optional[str]) -> bool:
        return self._apply(ops.update_label, segment_id, label)

    def update_transcription(self, segment_id: str, transcription: Optional[str]) -> bool:
        return self._apply(ops.update_transcription, segment_id, transcription)

    def update_export_exclusion(self, segment_id: str, excluded: bool) -> bool:
        return self._apply(ops.update_export_exclusion, segment_id, excluded)

    def move_boundary(self, index: int, new_time: float) -> bool:
        return self._apply(ops.move_boundary, index, new_time, self.min_segment_duration)

    def split_segment(self, at_time: float) -> bool:
        return self._apply(ops.split_segment, at_time, self.min_segment_duration)

    def merge_with_next(self, segment_id: str) -> bool:
        return self._apply(ops.merge_with_next, segment_id)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._segments, self._generation)

    def __repr__(self) -> str:
        return f"SegmentStore(generation={self._generation}, segments={len(self._segments)})"
