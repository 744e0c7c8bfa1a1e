"""
Unit tests for the persisted segment schema.
"""

import json

import pytest

from rehearsal_link.core.errors import SegmentInvariantError, SegmentSchemaError
from rehearsal_link.core.models import Segment, SegmentType
from rehearsal_link.modules.segments import (
    segment_to_dict,
    segment_from_dict,
    dump_segments,
    load_segments,
)


# =============================================================================
# Records
# =============================================================================

@pytest.mark.unit
class TestSegmentRecord:
    """Tests for one persisted record."""

    def test_keys(self, ten_second_segment):
        record = segment_to_dict(ten_second_segment[0])
        assert record == {
            'id': ten_second_segment[0].id,
            'startTime': 0.0,
            'endTime': 10.0,
            'type': 'performance',
            'label': 'Take 1',
            'transcription': 'intro',
            'isExcludedFromExport': False,
        }

    def test_decode_full_record(self, ten_second_segment):
        original = ten_second_segment[0]
        assert segment_from_dict(segment_to_dict(original)) == original

    def test_optional_keys_default(self):
        """Records written before optional fields existed still decode."""
        segment = segment_from_dict({
            'id': 'a', 'startTime': 0, 'endTime': 2.5, 'type': 'silence',
        })
        assert segment.label is None
        assert segment.transcription is None
        assert segment.excluded_from_export is False
        assert segment.duration == 2.5

    def test_empty_label_is_none(self):
        segment = segment_from_dict({
            'id': 'a', 'startTime': 0, 'endTime': 1, 'type': 'silence', 'label': '',
        })
        assert segment.label is None

    def test_missing_required_key(self):
        with pytest.raises(SegmentSchemaError) as exc_info:
            segment_from_dict({'id': 'a', 'startTime': 0, 'type': 'silence'})
        assert exc_info.value.data['missing'] == ['endTime']

    def test_unknown_type(self):
        with pytest.raises(SegmentSchemaError):
            segment_from_dict({'id': 'a', 'startTime': 0, 'endTime': 1, 'type': 'music'})

    def test_non_numeric_time(self):
        with pytest.raises(SegmentSchemaError):
            segment_from_dict({'id': 'a', 'startTime': 'zero', 'endTime': 1, 'type': 'silence'})

    @pytest.mark.parametrize("start, end", [(float("nan"), 5.0), (0.0, float("inf"))])
    def test_non_finite_time(self, start, end):
        with pytest.raises(SegmentSchemaError):
            segment_from_dict({'id': 'a', 'startTime': start, 'endTime': end, 'type': 'silence'})

    def test_not_an_object(self):
        with pytest.raises(SegmentSchemaError):
            segment_from_dict(['a', 0, 1, 'silence'])


# =============================================================================
# Lists
# =============================================================================

@pytest.mark.unit
class TestSegmentList:
    """Tests for dump_segments() / load_segments()."""

    def test_dump_is_json_array(self, three_segments):
        decoded = json.loads(dump_segments(three_segments))
        assert [r['type'] for r in decoded] == ['silence', 'performance', 'conversation']

    def test_load_preserves_ids(self, three_segments):
        loaded = load_segments(dump_segments(three_segments), total_duration=12.0)
        assert [s.id for s in loaded] == [s.id for s in three_segments]
        assert loaded == three_segments

    def test_load_decoded_list(self, three_segments):
        records = [segment_to_dict(s) for s in three_segments]
        assert load_segments(records) == three_segments

    def test_load_bytes(self, three_segments):
        assert load_segments(dump_segments(three_segments).encode('utf-8')) == three_segments

    def test_invalid_json(self):
        with pytest.raises(SegmentSchemaError):
            load_segments("[{")

    def test_undecodable_bytes(self):
        with pytest.raises(SegmentSchemaError):
            load_segments(b'\xff\xfe[\x80]')

    def test_nan_times_rejected(self):
        """JSON NaN literals decode in Python but never form a valid list."""
        payload = (
            '[{"id": "a", "startTime": NaN, "endTime": 5.0, "type": "silence"},'
            ' {"id": "b", "startTime": 5.0, "endTime": NaN, "type": "performance"}]'
        )
        with pytest.raises(SegmentSchemaError):
            load_segments(payload)

    def test_not_a_list(self):
        with pytest.raises(SegmentSchemaError):
            load_segments('{"id": "a"}')

    def test_gapped_list_rejected(self):
        """Records that decode but break contiguity are rejected."""
        segments = (
            Segment(0.0, 4.0, SegmentType.SILENCE),
            Segment(5.0, 8.0, SegmentType.PERFORMANCE),
        )
        with pytest.raises(SegmentInvariantError):
            load_segments(dump_segments(segments))

    def test_coverage_checked_against_duration(self, three_segments):
        with pytest.raises(SegmentInvariantError):
            load_segments(dump_segments(three_segments), total_duration=20.0)

    def test_empty_list(self):
        assert load_segments("[]") == ()
