"""
Layer 2: TASKS - analysis tasks.

Tasks combine primitives to solve one analysis problem each.
Each task:
- Takes an AudioContext (source + cancellation token)
- Returns a TaskResult subclass
- Is reusable and testable on its own

Usage:
    from rehearsal_link.modules.analysis.tasks import AudioContext, WaveformTask

    context = AudioContext(source=ArrayPCMSource(y, 44100))
    waveform = WaveformTask(target_sample_count=1000).execute(context)
    features = FeatureExtractionTask().execute(context)
"""

from .base import (
    AudioContext,
    TaskResult,
    BaseTask,
    CancellationToken,
    ProgressCallback,
)

from .downsampling import (
    WaveformResult,
    WaveformTask,
    downsample_buffer,
)

from .feature_extraction import (
    FeatureExtractionResult,
    FeatureExtractionTask,
    SpectralSetup,
)

__all__ = [
    # Base
    'AudioContext',
    'TaskResult',
    'BaseTask',
    'CancellationToken',
    'ProgressCallback',
    # Waveform
    'WaveformResult',
    'WaveformTask',
    'downsample_buffer',
    # Features
    'FeatureExtractionResult',
    'FeatureExtractionTask',
    'SpectralSetup',
]
