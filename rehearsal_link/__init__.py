"""
Rehearsal Link - segment rehearsal recordings into performance,
conversation and silence.

Layers:
- common: logging and pure numpy/scipy primitives
- core: errors, models, configuration, audio sources
- modules.analysis: waveform, features, classification, smoothing, sessions
- modules.segments: editing operations, store, schema, export
"""

__version__ = "0.1.0"

from .core.models import Segment, SegmentType, FeaturePoint, WaveformSample
from .core.audio import AudioLoader, ArrayPCMSource, PCMSource
from .core.config import Config
from .modules.analysis import AnalysisSession, RehearsalAnalysisPipeline
from .modules.segments import SegmentStore

__all__ = [
    '__version__',
    'Segment',
    'SegmentType',
    'FeaturePoint',
    'WaveformSample',
    'AudioLoader',
    'ArrayPCMSource',
    'PCMSource',
    'Config',
    'AnalysisSession',
    'RehearsalAnalysisPipeline',
    'SegmentStore',
]
