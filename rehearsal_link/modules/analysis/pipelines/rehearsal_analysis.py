"""
Rehearsal Analysis Pipeline - waveform, features, classification, smoothing.

Produces one immutable AnalysisSnapshot per run. The final segment list is
ordered, contiguous and covers [0, duration] of the source.
"""

import json
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .base import Pipeline, PipelineContext, PipelineStage, TaskStage
from ..classification import RuleBasedSegmentClassifier
from ..smoothing import SegmentSmoother
from ..tasks import (
    CancellationToken,
    FeatureExtractionTask,
    ProgressCallback,
    WaveformTask,
)
from ....common.logging import get_logger
from ....core.audio import PCMSource
from ....core.models import FeaturePoint, Segment, SegmentType, WaveformSample
from ...segments.serialization import segment_to_dict

logger = get_logger(__name__)

__all__ = [
    'AnalysisSnapshot', 'ClassifyStage', 'SmoothStage', 'RehearsalAnalysisPipeline',
]


@dataclass(frozen=True)
class AnalysisSnapshot:
    """
    Complete, immutable result of one analysis run.

    Published as a whole; readers never observe a partial list.
    """
    generation: int
    duration_sec: float
    sample_rate: float
    waveform: Tuple[WaveformSample, ...]
    features: Tuple[FeaturePoint, ...]
    segments: Tuple[Segment, ...]
    source_name: str = ""
    processing_time_sec: float = 0.0

    def with_segments(self, segments: Tuple[Segment, ...]) -> 'AnalysisSnapshot':
        return replace(self, segments=tuple(segments))

    def type_durations(self) -> Dict[str, float]:
        """Total seconds per segment type."""
        totals = {t.value: 0.0 for t in SegmentType}
        for segment in self.segments:
            totals[segment.type.value] += segment.duration
        return totals

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generation': self.generation,
            'source_name': self.source_name,
            'duration_sec': self.duration_sec,
            'sample_rate': self.sample_rate,
            'processing_time_sec': self.processing_time_sec,
            'n_features': len(self.features),
            'waveform': [[s.min, s.max] for s in self.waveform],
            'segments': [segment_to_dict(s) for s in self.segments],
            'summary': self.type_durations(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


class ClassifyStage(PipelineStage):
    """Label feature points and run-length encode them up to the audio end."""

    def __init__(self, classifier: Optional[RuleBasedSegmentClassifier] = None):
        self.classifier = classifier if classifier is not None else RuleBasedSegmentClassifier()

    def process(self, context: PipelineContext) -> PipelineContext:
        features = context.get_result('features')
        points = features.features if features is not None else ()
        raw = self.classifier.classify(points, end_time=context.duration_sec)
        context.set_result('raw_segments', raw)
        return context


class SmoothStage(PipelineStage):
    """Enforce the minimum segment duration."""

    def __init__(self, smoother: Optional[SegmentSmoother] = None):
        self.smoother = smoother if smoother is not None else SegmentSmoother()

    def process(self, context: PipelineContext) -> PipelineContext:
        raw = context.get_result('raw_segments', [])
        context.set_result('segments', self.smoother.smooth(raw))
        return context


class RehearsalAnalysisPipeline(Pipeline):
    """
    Rehearsal analysis pipeline.

    Stages:
    1. Waveform - min/max downsampling for display
    2. FeatureExtraction - per-window RMS/ZCR/centroid/band energies
    3. Classify - threshold rules, run-length encoded
    4. Smooth - minimum duration enforcement

    Usage:
        pipeline = RehearsalAnalysisPipeline.from_config(config)
        snapshot = pipeline.analyze(source)
        for segment in snapshot.segments:
            print(segment)
    """

    def __init__(
        self,
        waveform_task: Optional[WaveformTask] = None,
        feature_task: Optional[FeatureExtractionTask] = None,
        classifier: Optional[RuleBasedSegmentClassifier] = None,
        smoother: Optional[SegmentSmoother] = None,
        on_stage_complete=None,
    ):
        self.waveform_task = waveform_task if waveform_task is not None else WaveformTask()
        self.feature_task = feature_task if feature_task is not None else FeatureExtractionTask()
        self.classifier = classifier if classifier is not None else RuleBasedSegmentClassifier()
        self.smoother = smoother if smoother is not None else SegmentSmoother()

        stages = [
            TaskStage(self.waveform_task, 'waveform'),
            TaskStage(self.feature_task, 'features'),
            ClassifyStage(self.classifier),
            SmoothStage(self.smoother),
        ]
        super().__init__(stages, name="RehearsalAnalysis", on_stage_complete=on_stage_complete)

    @classmethod
    def from_config(cls, config, on_stage_complete=None) -> 'RehearsalAnalysisPipeline':
        return cls(
            waveform_task=WaveformTask.from_config(config),
            feature_task=FeatureExtractionTask.from_config(config),
            classifier=RuleBasedSegmentClassifier.from_config(config),
            smoother=SegmentSmoother.from_config(config),
            on_stage_complete=on_stage_complete,
        )

    def analyze(
        self,
        source: PCMSource,
        generation: int = 0,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> AnalysisSnapshot:
        """
        Analyze a PCM source.

        Raises:
            AnalysisCancelled: The token was cancelled mid-run
            RehearsalLinkError: A stage failed (e.g. FFTSetupError)
        """
        context = PipelineContext(
            source=source,
            generation=generation,
            cancel_token=cancel_token if cancel_token is not None else CancellationToken(generation),
            progress_callback=progress_callback,
        )
        context = self.run(context)

        waveform = context.get_result('waveform')
        features = context.get_result('features')
        segments = context.get_result('segments', ())

        logger.info(
            f"Analysis produced {len(segments)} segments",
            data={"generation": generation, "n_features": features.n_windows},
        )

        return AnalysisSnapshot(
            generation=generation,
            duration_sec=source.duration_sec,
            sample_rate=source.sample_rate,
            waveform=waveform.samples,
            features=features.features,
            segments=tuple(segments),
            source_name=context.source_name,
            processing_time_sec=context.results.get('_total_time', 0.0),
        )
