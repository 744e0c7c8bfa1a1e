"""
Base classes for Tasks layer.

AudioContext holds the PCM source and the run's cancellation token.
TaskResult is the base class for all task outputs.
ProgressCallback enables status updates from lower layers.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Callable

from ....core.audio import PCMSource
from ....core.errors import AnalysisCancelled


# Type alias for progress callback
# Args: (stage: str, progress: float 0-1, message: str)
ProgressCallback = Callable[[str, float, str], None]


class CancellationToken:
    """
    Cooperative cancellation flag shared between a run and its owner.

    The owner calls cancel(); the worker polls raise_if_cancelled() at
    safe points (per chunk, per window, between stages).
    """

    def __init__(self, generation: Optional[int] = None):
        self.generation = generation
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise AnalysisCancelled once cancel() has been called."""
        if self._event.is_set():
            raise AnalysisCancelled(self.generation)

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "active"
        return f"CancellationToken(generation={self.generation}, {state})"


@dataclass
class AudioContext:
    """
    Shared context for all tasks.

    Attributes:
        source: PCM source being analysed
        cancel_token: Token checked at every safe point
        progress_callback: Optional callback for progress updates
        metadata: Optional additional metadata
    """
    source: PCMSource
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    progress_callback: Optional[ProgressCallback] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def report_progress(self, stage: str, progress: float, message: str = ""):
        """Report progress to callback if set."""
        if self.progress_callback:
            self.progress_callback(stage, progress, message)

    def check_cancelled(self) -> None:
        self.cancel_token.raise_if_cancelled()

    @property
    def sample_rate(self) -> float:
        return self.source.sample_rate

    @property
    def duration_sec(self) -> float:
        return self.source.duration_sec


@dataclass
class TaskResult:
    """
    Base result for all tasks.

    All task results must inherit from this class
    and add their specific output fields.

    Attributes:
        success: Whether the task completed successfully
        task_name: Name of the task
        processing_time_sec: How long the task took
        error: Error message if success is False
        exception: The exception behind a failed result
    """
    success: bool
    task_name: str
    processing_time_sec: float
    error: Optional[str] = None
    exception: Optional[Exception] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            'success': self.success,
            'task_name': self.task_name,
            'processing_time_sec': self.processing_time_sec,
            'error': self.error
        }


class BaseTask(ABC):
    """
    Abstract base class for all tasks.

    Each task must implement the execute() method.

    Example:
        class MyTask(BaseTask):
            def execute(self, context: AudioContext) -> MyResult:
                chunk = context.source.read(0, 4096)
                return MyResult(success=True, task_name=self.name, ...)
    """

    @property
    def name(self) -> str:
        """Task name (class name by default)."""
        return self.__class__.__name__

    @abstractmethod
    def execute(self, context: AudioContext) -> TaskResult:
        """
        Execute the task on the given audio context.

        Args:
            context: AudioContext with the source and cancellation token

        Returns:
            TaskResult subclass with task-specific outputs

        Raises:
            AnalysisCancelled: When the context's token is cancelled
        """
        pass

    def execute_timed(self, context: AudioContext) -> TaskResult:
        """
        Execute the task and measure processing time.

        Failures are returned as an unsuccessful TaskResult carrying the
        exception. Cancellation is not a failure and propagates.
        """
        start = time.time()
        try:
            result = self.execute(context)
            result.processing_time_sec = time.time() - start
            return result
        except AnalysisCancelled:
            raise
        except Exception as e:
            return TaskResult(
                success=False,
                task_name=self.name,
                processing_time_sec=time.time() - start,
                error=str(e),
                exception=e,
            )

    def __repr__(self) -> str:
        return f"{self.name}()"
