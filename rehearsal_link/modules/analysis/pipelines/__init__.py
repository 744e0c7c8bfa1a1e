"""
Layer 3: PIPELINES - ordered stage composition.

Usage:
    from rehearsal_link.modules.analysis.pipelines import RehearsalAnalysisPipeline

    snapshot = RehearsalAnalysisPipeline().analyze(source)
"""

from .base import Pipeline, PipelineContext, PipelineStage, TaskStage
from .rehearsal_analysis import (
    AnalysisSnapshot,
    ClassifyStage,
    SmoothStage,
    RehearsalAnalysisPipeline,
)

__all__ = [
    'Pipeline',
    'PipelineContext',
    'PipelineStage',
    'TaskStage',
    'AnalysisSnapshot',
    'ClassifyStage',
    'SmoothStage',
    'RehearsalAnalysisPipeline',
]
