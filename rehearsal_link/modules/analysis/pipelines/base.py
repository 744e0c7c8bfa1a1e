"""
Base classes for Pipelines layer.

Pipeline = sequence of PipelineStages that transform PipelineContext.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Callable

from ....common.logging import get_logger
from ....core.audio import PCMSource
from ....core.errors import AnalysisCancelled, PipelineStageError, RehearsalLinkError
from ..tasks import AudioContext, BaseTask, CancellationToken, ProgressCallback

logger = get_logger(__name__)


@dataclass
class PipelineContext:
    """
    Context shared across pipeline stages.

    Attributes:
        source: PCM source being analysed
        generation: Analysis generation this run belongs to
        cancel_token: Token checked between stages and inside tasks
        progress_callback: Optional progress callback passed to tasks
        results: Accumulated results from stages
    """
    source: PCMSource
    generation: int = 0
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    progress_callback: Optional[ProgressCallback] = None
    results: Dict[str, Any] = field(default_factory=dict)
    audio_context: Optional[AudioContext] = None

    def __post_init__(self):
        if self.audio_context is None:
            self.audio_context = AudioContext(
                source=self.source,
                cancel_token=self.cancel_token,
                progress_callback=self.progress_callback,
                metadata={"generation": self.generation},
            )

    @property
    def source_name(self) -> str:
        return getattr(self.source, 'name', repr(self.source))

    @property
    def duration_sec(self) -> float:
        return self.source.duration_sec

    def get_result(self, key: str, default: Any = None) -> Any:
        """Get a result by key."""
        return self.results.get(key, default)

    def set_result(self, key: str, value: Any):
        """Set a result."""
        self.results[key] = value


class PipelineStage(ABC):
    """
    Abstract base class for pipeline stages.

    Each stage transforms a PipelineContext and returns
    the (possibly modified) context.
    """

    @property
    def name(self) -> str:
        """Stage name."""
        return self.__class__.__name__

    @abstractmethod
    def process(self, context: PipelineContext) -> PipelineContext:
        """
        Process the context.

        Args:
            context: Current pipeline context

        Returns:
            Modified context
        """
        pass

    def should_skip(self, context: PipelineContext) -> bool:
        """
        Check if this stage should be skipped.

        Override in subclasses for conditional execution.
        """
        return False

    def __repr__(self) -> str:
        return f"{self.name}()"


class Pipeline:
    """
    Base pipeline with stage composition.

    Pipelines execute a sequence of stages in order, passing context
    between them. Cancellation is checked before every stage.

    Usage:
        pipeline = Pipeline([
            TaskStage(WaveformTask(), "waveform"),
            TaskStage(FeatureExtractionTask(), "features"),
        ])
        context = pipeline.run(PipelineContext(source=source))
    """

    def __init__(
        self,
        stages: List[PipelineStage],
        name: Optional[str] = None,
        on_stage_complete: Optional[Callable[[str, PipelineContext], None]] = None
    ):
        """
        Initialize pipeline.

        Args:
            stages: List of stages to execute
            name: Pipeline name (auto-generated if None)
            on_stage_complete: Callback after each stage
        """
        self.stages = stages
        self.name = name or self.__class__.__name__
        self.on_stage_complete = on_stage_complete

    def run(self, context: PipelineContext) -> PipelineContext:
        """
        Run the pipeline.

        Args:
            context: Initial context

        Returns:
            Final context with all results

        Raises:
            AnalysisCancelled: The context's token was cancelled
            RehearsalLinkError: A stage failed
        """
        context.results['_pipeline_name'] = self.name
        context.results['_start_time'] = time.time()

        logger.info(f"[{self.name}] Starting pipeline for {context.source_name}")

        for i, stage in enumerate(self.stages):
            context.cancel_token.raise_if_cancelled()

            if stage.should_skip(context):
                logger.debug(f"[{self.name}] Skipping {stage.name}")
                continue

            logger.info(f"[{self.name}] Stage {i+1}/{len(self.stages)}: {stage.name}")

            stage_start = time.time()
            try:
                context = stage.process(context)
            except (AnalysisCancelled, RehearsalLinkError):
                raise
            except Exception as e:
                raise PipelineStageError(
                    f"Stage {stage.name} failed",
                    data={"stage": stage.name, "pipeline": self.name},
                    cause=e,
                ) from e
            elapsed = time.time() - stage_start

            context.results[f'_stage_{stage.name}_time'] = elapsed
            logger.info(f"[{self.name}] {stage.name} done in {elapsed:.2f}s", data={
                "stage": stage.name,
                "duration_sec": round(elapsed, 3),
            })

            if self.on_stage_complete:
                self.on_stage_complete(stage.name, context)

        total = time.time() - context.results['_start_time']
        context.results['_total_time'] = total
        logger.info(f"[{self.name}] Pipeline complete in {total:.2f}s")
        return context

    def __repr__(self) -> str:
        stage_names = [s.name for s in self.stages]
        return f"{self.name}({' -> '.join(stage_names)})"


# ============== Common Pipeline Stages ==============

class TaskStage(PipelineStage):
    """
    Generic stage that runs a Task.

    Wraps any BaseTask for use in a pipeline. A failed task result is
    re-raised: the task's own RehearsalLinkError when it has one,
    otherwise a PipelineStageError.
    """

    def __init__(self, task: BaseTask, result_key: str):
        """
        Initialize task stage.

        Args:
            task: Task instance to run
            result_key: Key to store result in context.results
        """
        self.task = task
        self.result_key = result_key

    @property
    def name(self) -> str:
        return f"Task_{self.task.name}"

    def process(self, context: PipelineContext) -> PipelineContext:
        """Run the task."""
        result = self.task.execute_timed(context.audio_context)

        if not result.success:
            if isinstance(result.exception, RehearsalLinkError):
                raise result.exception
            raise PipelineStageError(
                f"Task {self.task.name} failed: {result.error}",
                data={"task": self.task.name, "result_key": self.result_key},
                cause=result.exception,
            )

        context.set_result(self.result_key, result)
        return context
