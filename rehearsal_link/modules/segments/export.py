"""
Export selection and rendering.

Selected segments (not excluded, optionally of given types) are cut from
the source in timeline order, concatenated, gained and written with
soundfile.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import soundfile as sf

from ...common.logging import get_logger, format_duration
from ...core.audio import PCMSource
from ...core.errors import ExportError
from ...core.models import Segment, SegmentType

logger = get_logger(__name__)

DEFAULT_CONVERSATION_GAIN = 1.5
DEFAULT_PERFORMANCE_GAIN = 1.0


def _normalize_types(types: Optional[Iterable]) -> Optional[Tuple[SegmentType, ...]]:
    if types is None:
        return None
    return tuple(SegmentType(t) for t in types)


def select_export_segments(
    segments: Sequence[Segment],
    types: Optional[Iterable] = None,
) -> Tuple[Segment, ...]:
    """
    Segments to export, in timeline order.

    Args:
        segments: Current segment list
        types: Restrict to these types (SegmentType or their string values)
    """
    wanted = _normalize_types(types)
    return tuple(
        s for s in sorted(segments, key=lambda s: s.start_time)
        if not s.excluded_from_export and (wanted is None or s.type in wanted)
    )


def export_ranges(
    segments: Sequence[Segment],
    types: Optional[Iterable] = None,
) -> List[Tuple[float, float]]:
    """(start, end) pairs of the selected segments."""
    return [(s.start_time, s.end_time) for s in select_export_segments(segments, types)]


def default_gain(
    types: Optional[Iterable],
    conversation_gain: float = DEFAULT_CONVERSATION_GAIN,
    performance_gain: float = DEFAULT_PERFORMANCE_GAIN,
) -> float:
    """Gain used when exporting only conversation or only performance."""
    wanted = _normalize_types(types)
    if wanted and all(t == SegmentType.CONVERSATION for t in wanted):
        return conversation_gain
    if wanted and all(t == SegmentType.PERFORMANCE for t in wanted):
        return performance_gain
    return 1.0


def render_export(
    source: PCMSource,
    segments: Sequence[Segment],
    gain: float = 1.0,
) -> np.ndarray:
    """
    Concatenate segment ranges of the source into one buffer.

    Args:
        source: PCM source the segments were derived from
        segments: Segments to render (typically from select_export_segments)
        gain: Linear gain applied before clipping to [-1, 1]

    Returns:
        (frames, channels) float32 buffer

    Raises:
        ExportError: No segments, or the ranges contain no audio
    """
    if not segments:
        raise ExportError("No segments selected for export")

    sr = source.sample_rate
    pieces = []
    for segment in segments:
        start = int(round(segment.start_time * sr))
        end = int(round(segment.end_time * sr))
        if end > start:
            pieces.append(source.read(start, end - start))

    pieces = [p for p in pieces if p.shape[0] > 0]
    if not pieces:
        raise ExportError(
            "Selected segments contain no audio",
            data={"n_segments": len(segments)},
        )

    rendered = np.concatenate(pieces, axis=0) * np.float32(gain)
    return np.clip(rendered, -1.0, 1.0).astype(np.float32)


def export_segments(
    source: PCMSource,
    segments: Sequence[Segment],
    output_path: str,
    types: Optional[Iterable] = None,
    gain: Optional[float] = None,
    subtype: str = 'PCM_16',
) -> Path:
    """
    Render the selected segments and write them to an audio file.

    Args:
        source: PCM source
        segments: Full segment list; selection is applied here
        output_path: Destination file (format from the extension)
        types: Restrict to these types
        gain: Linear gain; defaults to default_gain(types)
        subtype: soundfile subtype

    Returns:
        Path of the written file

    Raises:
        ExportError: Nothing selected or the file cannot be written
    """
    selected = select_export_segments(segments, types)
    if gain is None:
        gain = default_gain(types)
    buffer = render_export(source, selected, gain=gain)

    path = Path(output_path).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(str(path), buffer, int(round(source.sample_rate)), subtype=subtype)
    except (RuntimeError, OSError, TypeError, ValueError) as e:
        raise ExportError(
            f"Failed to write export: {path.name}",
            data={"path": str(path), "subtype": subtype},
            cause=e,
        ) from e

    logger.info(
        f"Exported {len(selected)} segments ({format_duration(buffer.shape[0] / source.sample_rate)}) to {path.name}",
        data={"gain": gain, "n_segments": len(selected)},
    )
    return path


def export_segments_from_config(
    source: PCMSource,
    segments: Sequence[Segment],
    output_path: str,
    config,
    types: Optional[Iterable] = None,
) -> Path:
    """export_segments() with gains and subtype from the export section."""
    gain = default_gain(
        types,
        conversation_gain=config.get('export.conversation_gain', DEFAULT_CONVERSATION_GAIN),
        performance_gain=config.get('export.performance_gain', DEFAULT_PERFORMANCE_GAIN),
    )
    return export_segments(
        source, segments, output_path,
        types=types, gain=gain, subtype=config.get('export.subtype', 'PCM_16'),
    )
