"""
Unit tests for SegmentStore.

Tests cover:
1. Generation-checked publishing (stale results are dropped)
2. Edits through the store and change notifications
3. Concurrent publishers
"""

import threading

import pytest

from conftest import assert_contiguous, make_segments
from rehearsal_link.core.config import Config
from rehearsal_link.core.models import SegmentType
from rehearsal_link.modules.segments import SegmentStore


@pytest.fixture
def store(three_segments):
    store = SegmentStore()
    store.publish(three_segments, generation=1, duration=12.0)
    return store


# =============================================================================
# Publishing
# =============================================================================

@pytest.mark.unit
class TestPublish:
    """Tests for publish() and clear()."""

    def test_initial_state(self):
        store = SegmentStore()
        assert store.segments == ()
        assert store.generation == -1
        assert len(store) == 0

    def test_publish_replaces_list(self, store, three_segments):
        assert store.segments == three_segments
        assert store.generation == 1
        assert store.duration == 12.0

    def test_duration_defaults_to_last_end(self, three_segments):
        store = SegmentStore()
        store.publish(three_segments, generation=0)
        assert store.duration == 12.0

    def test_stale_generation_dropped(self, store, three_segments):
        """An older analysis never overwrites a newer one."""
        stale = make_segments([(0.0, 12.0, SegmentType.PERFORMANCE)])
        assert store.publish(stale, generation=0) is False
        assert store.segments == three_segments
        assert store.generation == 1

    def test_same_generation_accepted(self, store):
        replacement = make_segments([(0.0, 12.0, SegmentType.SILENCE)])
        assert store.publish(replacement, generation=1) is True
        assert len(store) == 1

    def test_clear_keeps_generation(self, store):
        store.clear()
        assert store.segments == ()
        assert store.duration == 0.0
        assert store.generation == 1

    def test_from_config(self):
        config = Config()
        config.set('editing.min_segment_duration', 0.5)
        assert SegmentStore.from_config(config).min_segment_duration == 0.5


# =============================================================================
# Editing
# =============================================================================

@pytest.mark.unit
class TestStoreEdits:
    """Edits report whether the list changed."""

    def test_lookup(self, store, three_segments):
        assert store.get(three_segments[1].id) == three_segments[1]
        assert store.get("missing") is None
        assert store.segment_at(9.0) == three_segments[2]

    def test_update_fields(self, store, three_segments):
        seg_id = three_segments[1].id
        assert store.update_type(seg_id, SegmentType.CONVERSATION)
        assert store.update_label(seg_id, "Bridge")
        assert store.update_transcription(seg_id, "again from the bridge")
        assert store.update_export_exclusion(seg_id, True)

        updated = store.get(seg_id)
        assert updated.type == SegmentType.CONVERSATION
        assert updated.label == "Bridge"
        assert updated.transcription == "again from the bridge"
        assert updated.excluded_from_export is True

    def test_split_and_merge(self, store):
        assert store.split_segment(6.0)
        assert len(store) == 4

        assert store.merge_with_next(store.segments[1].id)
        assert len(store) == 3
        assert_contiguous(store.segments, total_duration=12.0)

    def test_split_respects_min_duration(self, three_segments):
        store = SegmentStore(min_segment_duration=1.0)
        store.publish(three_segments, generation=0)

        assert store.split_segment(4.5) is False
        assert store.split_segment(5.5) is True

    def test_move_boundary(self, store):
        assert store.move_boundary(0, 3.0)
        assert store.segments[0].end_time == 3.0
        assert store.segments[1].start_time == 3.0

    def test_noop_edits_return_false(self, store):
        before = store.segments
        assert store.update_type("missing", SegmentType.SILENCE) is False
        assert store.split_segment(4.0) is False
        assert store.merge_with_next(before[-1].id) is False
        assert store.move_boundary(7, 1.0) is False
        assert store.segments is before


# =============================================================================
# Listeners
# =============================================================================

@pytest.mark.unit
class TestListeners:
    """Listeners see every complete list change."""

    def test_notified_on_publish_and_edit(self, store, three_segments):
        seen = []
        store.add_listener(lambda segments, generation: seen.append((len(segments), generation)))

        store.split_segment(6.0)
        store.publish(three_segments, generation=2)

        assert seen == [(4, 1), (3, 2)]

    def test_not_notified_on_noop(self, store):
        seen = []
        store.add_listener(lambda segments, generation: seen.append(generation))

        store.split_segment(4.0)
        store.publish((), generation=0)

        assert seen == []


# =============================================================================
# Concurrency
# =============================================================================

@pytest.mark.unit
class TestConcurrentPublish:
    """Racing publishers leave the newest generation in place."""

    def test_newest_generation_wins(self):
        store = SegmentStore()
        results = {
            gen: make_segments([(0.0, float(gen + 1), SegmentType.PERFORMANCE)])
            for gen in range(50)
        }
        barrier = threading.Barrier(len(results))

        def publish(gen):
            barrier.wait()
            store.publish(results[gen], generation=gen)

        threads = [threading.Thread(target=publish, args=(gen,)) for gen in reversed(range(50))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.generation == 49
        assert store.segments == results[49]

    def test_edits_interleaved_with_publish(self, three_segments):
        """Every observed list is complete and contiguous."""
        store = SegmentStore()
        store.publish(three_segments, generation=0)
        observed = []
        store.add_listener(lambda segments, generation: observed.append(segments))

        def edit():
            for i in range(20):
                store.split_segment(0.5 + i * 0.5)

        def publish():
            for gen in range(1, 21):
                store.publish(three_segments, generation=gen)

        threads = [threading.Thread(target=edit), threading.Thread(target=publish)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for segments in observed:
            assert_contiguous(segments, total_duration=12.0)
