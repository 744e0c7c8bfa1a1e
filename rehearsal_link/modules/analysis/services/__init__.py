"""Services: coordination of analysis runs."""

from .analysis_session import (
    AnalysisSession,
    AnalysisOutcome,
    AnalysisStatus,
)

__all__ = [
    'AnalysisSession',
    'AnalysisOutcome',
    'AnalysisStatus',
]
