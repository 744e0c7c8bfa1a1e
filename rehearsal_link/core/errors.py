"""
Custom error classes with structured logging and error propagation.

All errors include run context and structured data for observability.
"""

from typing import Optional, Dict, Any
from ..common.logging import get_logger
from ..common.logging.correlation import get_run_id, get_generation

logger = get_logger(__name__)


class RehearsalLinkError(Exception):
    """
    Base error class for all application errors.

    Automatically logs errors with run context when raised.
    """

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize error with structured context.

        Args:
            message: Human-readable error message
            data: Structured data for observability
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.data = data or {}
        self.cause = cause

        # Add run context
        self.run_id = get_run_id()
        self.generation = get_generation()

        self._log_error()

    def _log_error(self):
        """Log error with structured data."""
        log_data = {
            "error_type": self.__class__.__name__,
            "run_id": self.run_id,
            "generation": self.generation,
            **self.data,
        }

        if self.cause:
            log_data["cause"] = str(self.cause)

        logger.error(self.message, data=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "data": self.data,
            "run_id": self.run_id,
            "generation": self.generation,
            "cause": str(self.cause) if self.cause else None,
        }


# Audio processing errors
class AudioProcessingError(RehearsalLinkError):
    """Error during audio processing (loading, reading, FFT setup)."""
    pass


class AudioLoadError(AudioProcessingError):
    """Error loading audio file."""
    pass


class FFTSetupError(AudioProcessingError):
    """Error preparing the transform (window, FFT size, buffers)."""
    pass


# Analysis errors
class AnalysisError(RehearsalLinkError):
    """Error during analysis pipeline."""
    pass


class FeatureExtractionError(AnalysisError):
    """Error computing per-window features."""
    pass


class PipelineStageError(AnalysisError):
    """Error executing a pipeline stage."""
    pass


# Configuration errors
class ConfigurationError(RehearsalLinkError):
    """Error in configuration."""
    pass


# Segment errors
class SegmentError(RehearsalLinkError):
    """Error in segment data."""
    pass


class SegmentInvariantError(SegmentError):
    """Segment list is unordered, overlapping, gapped or has empty segments."""
    pass


class SegmentSchemaError(SegmentError):
    """Persisted segment record cannot be decoded."""
    pass


# Export errors
class ExportError(RehearsalLinkError):
    """Error rendering or writing exported audio."""
    pass


class AnalysisCancelled(Exception):
    """
    Raised inside a pipeline run superseded by a newer one.

    Not a RehearsalLinkError: cancellation is an expected outcome and
    is neither logged as an error nor reported as a failure.
    """

    def __init__(self, generation: Optional[int] = None):
        super().__init__(f"Analysis generation {generation} cancelled")
        self.generation = generation
