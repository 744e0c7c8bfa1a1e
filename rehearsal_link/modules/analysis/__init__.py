"""
Analysis module: waveform, features, classification, smoothing.

Layers:
- tasks: one analysis problem each (downsampling, feature extraction)
- classification / smoothing: rule-based labelling of feature points
- pipelines: ordered stage composition producing AnalysisSnapshot
- services: background runs with cancellation and publishing
"""

from .classification import ClassifierThresholds, RuleBasedSegmentClassifier
from .smoothing import SegmentSmoother
from .pipelines import AnalysisSnapshot, RehearsalAnalysisPipeline
from .services import AnalysisSession, AnalysisOutcome, AnalysisStatus

__all__ = [
    'ClassifierThresholds',
    'RuleBasedSegmentClassifier',
    'SegmentSmoother',
    'AnalysisSnapshot',
    'RehearsalAnalysisPipeline',
    'AnalysisSession',
    'AnalysisOutcome',
    'AnalysisStatus',
]
