"""Audio adapters: PCM sources, file loading, normalization."""

from .source import PCMSource, ArrayPCMSource, SoundFilePCMSource
from .loader import AudioLoader
from .processing import normalize_source, normalize_source_from_config, NORMALIZATION_METHODS

__all__ = [
    'PCMSource',
    'ArrayPCMSource',
    'SoundFilePCMSource',
    'AudioLoader',
    'normalize_source',
    'normalize_source_from_config',
    'NORMALIZATION_METHODS',
]
