"""Segment editing, storage, persisted schema and export."""

from .operations import (
    MIN_SEGMENT_DURATION,
    find_index,
    segment_at,
    update_type,
    update_label,
    update_transcription,
    update_export_exclusion,
    move_boundary,
    split_segment,
    merge_with_next,
    check_invariants,
)
from .store import SegmentStore
from .serialization import segment_to_dict, segment_from_dict, dump_segments, load_segments
from .export import (
    select_export_segments,
    export_ranges,
    default_gain,
    render_export,
    export_segments,
    export_segments_from_config,
)

__all__ = [
    # Operations
    'MIN_SEGMENT_DURATION',
    'find_index',
    'segment_at',
    'update_type',
    'update_label',
    'update_transcription',
    'update_export_exclusion',
    'move_boundary',
    'split_segment',
    'merge_with_next',
    'check_invariants',
    # Store
    'SegmentStore',
    # Schema
    'segment_to_dict',
    'segment_from_dict',
    'dump_segments',
    'load_segments',
    # Export
    'select_export_segments',
    'export_ranges',
    'default_gain',
    'render_export',
    'export_segments',
    'export_segments_from_config',
]
