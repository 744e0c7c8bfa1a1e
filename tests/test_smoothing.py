"""
Unit tests for minimum-duration smoothing.

Tests cover:
1. Absorption of short runs (forward before backward)
2. Coalescing of same-type neighbours
3. Properties on random run sequences (idempotence, minimum duration)
"""

import random

import pytest

from conftest import assert_contiguous
from rehearsal_link.core.models import RawSegment, SegmentType
from rehearsal_link.modules.analysis import RuleBasedSegmentClassifier, SegmentSmoother

P = SegmentType.PERFORMANCE
C = SegmentType.CONVERSATION
S = SegmentType.SILENCE


def runs_from(durations_and_types):
    """Contiguous raw runs from (duration, type) pairs starting at 0."""
    runs = []
    t = 0.0
    for duration, seg_type in durations_and_types:
        runs.append(RawSegment(t, t + duration, seg_type))
        t += duration
    return runs


def bounds(segments):
    return [(s.start_time, s.end_time, s.type) for s in segments]


@pytest.fixture
def smoother():
    return SegmentSmoother(min_duration=3.0)


# =============================================================================
# Absorption Rules
# =============================================================================

@pytest.mark.unit
class TestAbsorption:
    """Tests for the left-to-right accumulator."""

    def test_empty(self, smoother):
        assert smoother.smooth([]) == ()

    def test_single_short_run_survives(self, smoother):
        """Nothing to absorb into: a lone short run is kept."""
        segments = smoother.smooth(runs_from([(1.0, C)]))
        assert bounds(segments) == [(0.0, 1.0, C)]

    def test_scenario_gives_three_segments(self, smoother, scenario_features):
        """Classifier + smoother on the silence/performance/conversation scenario."""
        raw = RuleBasedSegmentClassifier().classify(scenario_features)
        segments = smoother.smooth(raw)

        assert [s.type for s in segments] == [S, P, C]
        assert segments[0].end_time == pytest.approx(4.1)
        assert segments[1].end_time == pytest.approx(8.1)
        assert_contiguous(segments, total_duration=12.0)

    def test_short_run_joins_predecessor(self, smoother):
        """Between two long runs of different types, forward absorption wins."""
        segments = smoother.smooth(runs_from([(10.0, P), (1.0, C), (10.0, S)]))
        assert bounds(segments) == [(0.0, 11.0, P), (11.0, 21.0, S)]

    def test_short_first_run_takes_next_type(self, smoother):
        """A short leading run is absorbed backward into its successor."""
        segments = smoother.smooth(runs_from([(1.0, C), (10.0, P)]))
        assert bounds(segments) == [(0.0, 11.0, P)]

    def test_chain_of_short_runs(self, smoother):
        """Short runs accumulate until a long run takes them over."""
        segments = smoother.smooth(runs_from([(1.0, C), (1.0, S), (10.0, P)]))
        assert bounds(segments) == [(0.0, 12.0, P)]

    def test_same_type_neighbours_coalesce(self, smoother):
        segments = smoother.smooth(runs_from([(5.0, P), (5.0, P)]))
        assert bounds(segments) == [(0.0, 10.0, P)]

    def test_interruption_of_same_type_is_removed(self, smoother):
        """P / short C / P collapses into a single performance."""
        segments = smoother.smooth(runs_from([(10.0, P), (1.0, C), (10.0, P)]))
        assert bounds(segments) == [(0.0, 21.0, P)]

    def test_boundary_is_exactly_min_duration(self, smoother):
        """A run of exactly min_duration is not short."""
        segments = smoother.smooth(runs_from([(5.0, P), (3.0, C)]))
        assert bounds(segments) == [(0.0, 5.0, P), (5.0, 8.0, C)]

    def test_fresh_ids(self, smoother):
        """Every output segment has its own id."""
        segments = smoother.smooth(runs_from([(5.0, P), (5.0, C), (5.0, S)]))
        assert len({s.id for s in segments}) == 3

    def test_from_config(self):
        from rehearsal_link.core.config import Config

        config = Config()
        config.set('smoothing.min_duration', 1.5)
        assert SegmentSmoother.from_config(config).min_duration == 1.5


# =============================================================================
# Properties
# =============================================================================

def random_runs(rng: random.Random, n: int):
    types = [P, C, S]
    return runs_from([
        (rng.choice([0.2, 0.5, 1.0, 2.5, 3.0, 4.0, 8.0]), rng.choice(types))
        for _ in range(n)
    ])


@pytest.mark.invariant
class TestSmoothingProperties:
    """Properties that hold for any contiguous run sequence."""

    @pytest.mark.parametrize("seed", range(20))
    def test_output_is_contiguous_and_covers_input(self, smoother, seed):
        raw = random_runs(random.Random(seed), 25)
        segments = smoother.smooth(raw)
        assert_contiguous(segments, tol=1e-9)
        assert segments[0].start_time == raw[0].start_time
        assert segments[-1].end_time == raw[-1].end_time

    @pytest.mark.parametrize("seed", range(20))
    def test_no_short_segments_unless_alone(self, smoother, seed):
        segments = smoother.smooth(random_runs(random.Random(seed), 25))
        if len(segments) > 1:
            assert all(s.duration >= smoother.min_duration for s in segments)

    @pytest.mark.parametrize("seed", range(20))
    def test_adjacent_types_differ(self, smoother, seed):
        segments = smoother.smooth(random_runs(random.Random(seed), 25))
        for prev, nxt in zip(segments, segments[1:]):
            assert prev.type != nxt.type

    @pytest.mark.parametrize("seed", range(20))
    def test_idempotent(self, smoother, seed):
        """Smoothing a smoothed list changes nothing but ids."""
        once = smoother.smooth(random_runs(random.Random(seed), 25))
        twice = smoother.resmooth(once)
        assert bounds(twice) == bounds(once)
