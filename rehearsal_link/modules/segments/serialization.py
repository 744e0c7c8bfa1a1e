"""
Persisted segment schema.

Records use the keys id, startTime, endTime, type, label, transcription
and isExcludedFromExport. Optional keys may be missing.
"""

import json
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ...core.errors import SegmentSchemaError
from ...core.models import Segment, SegmentType
from .operations import check_invariants

REQUIRED_KEYS = ('id', 'startTime', 'endTime', 'type')


def segment_to_dict(segment: Segment) -> Dict[str, Any]:
    return {
        'id': segment.id,
        'startTime': segment.start_time,
        'endTime': segment.end_time,
        'type': segment.type.value,
        'label': segment.label,
        'transcription': segment.transcription,
        'isExcludedFromExport': segment.excluded_from_export,
    }


def segment_from_dict(data: Dict[str, Any]) -> Segment:
    """
    Decode one persisted record.

    Raises:
        SegmentSchemaError: Missing required keys or invalid values
    """
    if not isinstance(data, dict):
        raise SegmentSchemaError(
            "Segment record must be an object",
            data={"record_type": type(data).__name__},
        )

    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise SegmentSchemaError(
            f"Segment record missing keys: {', '.join(missing)}",
            data={"missing": missing},
        )

    try:
        segment_type = SegmentType(data['type'])
    except ValueError as e:
        raise SegmentSchemaError(
            f"Unknown segment type: {data['type']!r}",
            data={"type": data['type']},
            cause=e,
        ) from e

    try:
        start = float(data['startTime'])
        end = float(data['endTime'])
    except (TypeError, ValueError) as e:
        raise SegmentSchemaError(
            "Segment times must be numbers",
            data={"startTime": data['startTime'], "endTime": data['endTime']},
            cause=e,
        ) from e

    if not (math.isfinite(start) and math.isfinite(end)):
        raise SegmentSchemaError(
            "Segment times must be finite",
            data={"startTime": start, "endTime": end},
        )

    return Segment(
        start_time=start,
        end_time=end,
        type=segment_type,
        id=str(data['id']),
        label=data.get('label') or None,
        transcription=data.get('transcription'),
        excluded_from_export=bool(data.get('isExcludedFromExport', False)),
    )


def dump_segments(segments: Iterable[Segment], indent: Optional[int] = 2) -> str:
    """Serialize segments to a JSON array."""
    return json.dumps([segment_to_dict(s) for s in segments], indent=indent)


def load_segments(
    payload: Union[str, bytes, List[Dict[str, Any]]],
    total_duration: Optional[float] = None,
) -> Tuple[Segment, ...]:
    """
    Decode and validate a persisted segment list.

    Args:
        payload: JSON text or an already-decoded list of records
        total_duration: When given, the list must cover [0, total_duration]

    Raises:
        SegmentSchemaError: Malformed JSON or records
        SegmentInvariantError: Records decode but break list invariants
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SegmentSchemaError("Invalid segment JSON", cause=e) from e

    if not isinstance(payload, list):
        raise SegmentSchemaError(
            "Segment payload must be a list",
            data={"payload_type": type(payload).__name__},
        )

    segments = tuple(segment_from_dict(record) for record in payload)
    check_invariants(segments, total_duration=total_duration)
    return segments
