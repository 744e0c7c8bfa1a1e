"""
Rule-based segment classification.

Each FeaturePoint is labelled by an ordered list of threshold rules and
consecutive points with the same label are run-length encoded into raw
segments.
"""

from dataclasses import dataclass, asdict
from typing import List, Optional, Sequence

from ...common.logging import get_logger
from ...core.models import FeaturePoint, RawSegment, SegmentType

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassifierThresholds:
    """Classifier thresholds (calibrated on RMS-normalized recordings)."""
    silence_threshold: float = 0.0008            # ~ -62 dBFS
    performance_threshold: float = 0.015         # ~ -36 dBFS
    speech_ratio_threshold: float = 0.6
    conversation_centroid_ceiling: float = 3500.0
    performance_centroid_floor: float = 4500.0
    performance_zcr_floor: float = 0.25

    @classmethod
    def from_config(cls, config) -> 'ClassifierThresholds':
        section = config.get('classification', {}) or {}
        known = {k: float(v) for k, v in section.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self):
        return asdict(self)


class RuleBasedSegmentClassifier:
    """
    Classify feature points into silence, performance and conversation.

    Rules, first match wins:
        1. rms < silence_threshold                 -> SILENCE
        2. rms > performance_threshold             -> PERFORMANCE
        3. speech_ratio > speech_ratio_threshold
           and centroid < conversation ceiling     -> CONVERSATION
        4. centroid > performance floor
           or zcr > performance_zcr_floor          -> PERFORMANCE
        5. otherwise                               -> CONVERSATION
    """

    def __init__(self, thresholds: Optional[ClassifierThresholds] = None):
        self.thresholds = thresholds if thresholds is not None else ClassifierThresholds()

    @classmethod
    def from_config(cls, config) -> 'RuleBasedSegmentClassifier':
        return cls(ClassifierThresholds.from_config(config))

    def classify_point(self, point: FeaturePoint) -> SegmentType:
        t = self.thresholds

        if point.rms < t.silence_threshold:
            return SegmentType.SILENCE
        if point.rms > t.performance_threshold:
            return SegmentType.PERFORMANCE

        if (point.speech_ratio > t.speech_ratio_threshold
                and point.spectral_centroid < t.conversation_centroid_ceiling):
            return SegmentType.CONVERSATION
        if (point.spectral_centroid > t.performance_centroid_floor
                or point.zero_crossing_rate > t.performance_zcr_floor):
            return SegmentType.PERFORMANCE
        return SegmentType.CONVERSATION

    def classify(
        self,
        features: Sequence[FeaturePoint],
        end_time: Optional[float] = None,
    ) -> List[RawSegment]:
        """
        Run-length encode per-point labels into raw segments.

        A label change closes the current run at the new point's time.
        The last run is closed at end_time when given, else at the last
        point's time. Zero-length runs are never emitted.

        Args:
            features: Feature points in time order
            end_time: Explicit end of the final run (e.g. audio duration)

        Returns:
            Raw segments in time order; empty for empty input
        """
        if not features:
            return []

        runs: List[RawSegment] = []
        current_type = SegmentType.SILENCE
        start_time = features[0].time

        for point in features:
            point_type = self.classify_point(point)
            if point_type == current_type:
                continue
            if point.time > start_time:
                runs.append(RawSegment(start_time, point.time, current_type))
            current_type = point_type
            start_time = point.time

        final_time = features[-1].time if end_time is None else end_time
        if final_time > start_time:
            runs.append(RawSegment(start_time, final_time, current_type))

        logger.debug(
            f"Classified {len(features)} points into {len(runs)} runs",
            data={"end_time": final_time},
        )
        return runs
