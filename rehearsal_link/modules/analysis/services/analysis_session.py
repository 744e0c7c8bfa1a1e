"""
Analysis Session - runs the analysis pipeline off the owning thread.

Keeps responsibilities separate:
- Pipeline stages: modules/analysis/pipelines/rehearsal_analysis.py
- Segment ownership and edits: modules/segments/store.py
- Run coordination (generations, cancellation, publishing): this module

Every submit() starts a new generation and cancels the previous run.
Workers never touch the store: finished runs go to an outbox queue that
the owning thread drains with poll(). Outcomes from superseded
generations are dropped there, so a stale run never overwrites a fresher
one.
"""

import queue
import threading
from concurrent.futures import ThreadPoolExecutor, Future
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ....common.logging import (
    get_logger,
    generate_run_id,
    set_run_id,
    set_generation,
    clear_run_context,
)
from ....core.audio import PCMSource
from ....core.errors import AnalysisCancelled, AnalysisError, RehearsalLinkError
from ...segments.store import SegmentStore
from ..pipelines import AnalysisSnapshot, RehearsalAnalysisPipeline
from ..tasks import CancellationToken, ProgressCallback

logger = get_logger(__name__)

DEFAULT_MAX_WORKERS = 2


class AnalysisStatus(Enum):
    """Terminal state of one analysis run."""
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of one run, as delivered through the outbox."""
    generation: int
    status: AnalysisStatus
    snapshot: Optional[AnalysisSnapshot] = None
    error: Optional[RehearsalLinkError] = None
    run_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == AnalysisStatus.COMPLETED

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None


class AnalysisSession:
    """
    Coordinates background analysis runs and publishes results to a store.

    Usage:
        session = AnalysisSession.from_config(config)
        session.submit(source)
        ...
        outcome = session.poll()      # on the owning thread
        segments = session.store.segments

        # or, blocking
        outcome = session.analyze(source)
    """

    def __init__(
        self,
        pipeline: Optional[RehearsalAnalysisPipeline] = None,
        store: Optional[SegmentStore] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """
        Args:
            pipeline: Pipeline to run (default configuration if None)
            store: Store receiving published segments
            max_workers: Worker threads; superseded runs may still be winding down
        """
        self.pipeline = pipeline if pipeline is not None else RehearsalAnalysisPipeline()
        self.store = store if store is not None else SegmentStore()
        self.max_workers = max(1, int(max_workers))

        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._outbox: "queue.Queue[AnalysisOutcome]" = queue.Queue()
        self._generation = 0
        self._token: Optional[CancellationToken] = None
        self._future: Optional[Future] = None
        self._snapshot: Optional[AnalysisSnapshot] = None

    @classmethod
    def from_config(cls, config, max_workers: Optional[int] = None) -> 'AnalysisSession':
        return cls(
            pipeline=RehearsalAnalysisPipeline.from_config(config),
            store=SegmentStore.from_config(config),
            max_workers=max_workers or config.get('analysis.max_workers', DEFAULT_MAX_WORKERS),
        )

    @property
    def generation(self) -> int:
        """Most recently submitted generation."""
        with self._lock:
            return self._generation

    @property
    def snapshot(self) -> Optional[AnalysisSnapshot]:
        """Last published snapshot (segments as produced by the pipeline)."""
        return self._snapshot

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._future is not None and not self._future.done()

    def submit(
        self,
        source: PCMSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> 'Future[AnalysisOutcome]':
        """
        Start analysing a (new or re-normalized) source.

        Cancels the previous run and discards the current segments.

        Returns:
            Future resolving to the run's AnalysisOutcome
        """
        with self._lock:
            if self._token is not None:
                self._token.cancel()

            self._generation += 1
            generation = self._generation
            token = CancellationToken(generation)
            self._token = token

            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="analysis",
                )
            self._future = self._executor.submit(
                self._run, source, generation, token, progress_callback
            )
            future = self._future

        self.store.clear()
        logger.info(
            f"Submitted analysis generation {generation}",
            data={"generation": generation, "source": getattr(source, 'name', None)},
        )
        return future

    def _run(
        self,
        source: PCMSource,
        generation: int,
        token: CancellationToken,
        progress_callback: Optional[ProgressCallback],
    ) -> AnalysisOutcome:
        run_id = generate_run_id()
        set_run_id(run_id)
        set_generation(generation)
        try:
            snapshot = self.pipeline.analyze(
                source,
                generation=generation,
                cancel_token=token,
                progress_callback=progress_callback,
            )
            outcome = AnalysisOutcome(generation, AnalysisStatus.COMPLETED, snapshot=snapshot, run_id=run_id)
        except AnalysisCancelled:
            logger.info(f"Analysis generation {generation} cancelled")
            outcome = AnalysisOutcome(generation, AnalysisStatus.CANCELLED, run_id=run_id)
        except RehearsalLinkError as e:
            outcome = AnalysisOutcome(generation, AnalysisStatus.FAILED, error=e, run_id=run_id)
        except Exception as e:
            error = AnalysisError(
                f"Analysis generation {generation} failed",
                data={"generation": generation},
                cause=e,
            )
            outcome = AnalysisOutcome(generation, AnalysisStatus.FAILED, error=error, run_id=run_id)
        finally:
            clear_run_context()

        self._outbox.put(outcome)
        return outcome

    def poll(self) -> Optional[AnalysisOutcome]:
        """
        Drain the outbox on the owning thread.

        Completed outcomes of the current generation are published to the
        store; outcomes of superseded generations are dropped.

        Returns:
            The current generation's outcome if it arrived, else None
        """
        current = None
        for outcome in self._drain():
            if outcome.generation != self.generation:
                logger.info(
                    f"Dropping stale analysis result (generation {outcome.generation})",
                    data={"generation": outcome.generation, "current": self.generation,
                          "status": outcome.status.value},
                )
                continue

            if outcome.status == AnalysisStatus.COMPLETED:
                snapshot = outcome.snapshot
                if self.store.publish(snapshot.segments, snapshot.generation, snapshot.duration_sec):
                    self._snapshot = snapshot
            current = outcome
        return current

    def _drain(self) -> List[AnalysisOutcome]:
        outcomes = []
        while True:
            try:
                outcomes.append(self._outbox.get_nowait())
            except queue.Empty:
                return outcomes

    def wait(self, timeout: Optional[float] = None) -> Optional[AnalysisOutcome]:
        """
        Block until the current run finishes, then poll().

        Returns:
            The current generation's outcome (None if nothing was submitted)
        """
        with self._lock:
            future = self._future
        if future is None:
            return None
        future.result(timeout=timeout)
        return self.poll()

    def analyze(
        self,
        source: PCMSource,
        progress_callback: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None,
    ) -> AnalysisOutcome:
        """Submit and wait; convenience for scripts and the CLI."""
        self.submit(source, progress_callback=progress_callback)
        return self.wait(timeout=timeout)

    def cancel(self) -> None:
        """Cancel the current run, if any."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()

    def shutdown(self, wait: bool = True) -> None:
        """Cancel the current run and stop the worker pool."""
        self.cancel()
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> 'AnalysisSession':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
