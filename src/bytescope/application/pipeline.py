"""Pipeline coordinator: discovery, parallel collection, merge and rendering."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
import os
import time

from ..domain.exceptions import (
    ByteScopeError,
    PipelineStateError,
    RenderingError,
    RootDirectoryError,
)
from ..domain.models.histogram import ByteHistogram, merge_into
from ..infrastructure.config.config_models import PipelineConfig
from ..infrastructure.discovery import DirectoryWalker, WalkStats
from ..infrastructure.logging import ByteScopeLogger
from ..infrastructure.parallel import ClosableQueue, HistogramWorkerPool, WorkerConfig
from ..infrastructure.progress import ProgressTracker


class PipelineState(str, Enum):
    """Lifecycle of a single pipeline run."""
    INITIALIZING = "initializing"
    COLLECTING = "collecting"  # discovery and collection run concurrently
    MERGING = "merging"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS = {
    PipelineState.INITIALIZING: {PipelineState.COLLECTING, PipelineState.FAILED},
    PipelineState.COLLECTING: {PipelineState.MERGING, PipelineState.FAILED},
    PipelineState.MERGING: {PipelineState.RENDERING, PipelineState.FAILED},
    PipelineState.RENDERING: {PipelineState.DONE},
    PipelineState.DONE: set(),
    PipelineState.FAILED: set(),
}


@dataclass
class PipelineResult:
    """Outcome of the collection and merge stages."""
    root: str
    histogram: ByteHistogram
    walk_stats: WalkStats
    worker_stats: Dict[str, Any]
    partials_merged: int
    duration_seconds: float

    @property
    def total_bytes(self) -> int:
        return self.histogram.total

    @property
    def files_processed(self) -> int:
        return self.worker_stats.get("files_processed", 0)

    @property
    def files_failed(self) -> int:
        return self.worker_stats.get("files_failed", 0)


@dataclass
class RenderOutcome:
    """Outputs and failures of the rendering stage, keyed by renderer name."""
    outputs: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors


class PipelineCoordinator:
    """
    Owns the queue, the result collection and the worker pool for one run.

    Order of operations:
    1. Validate the root directory (the only fatal error)
    2. Create the bounded path queue and the result collection
    3. Start the worker pool
    4. Walk the tree on the calling thread, feeding the queue
    5. Close the queue once the walk returns
    6. The pool's supervisor closes the result collection after all
       workers have emitted their partial histograms
    7. Merge every partial into the total histogram
    8. Hand the total to the renderers
    """

    def __init__(
        self,
        config: PipelineConfig,
        progress: Optional[ProgressTracker] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            config: Pipeline configuration (root, pool size, queue capacity)
            progress: Optional tracker receiving walker and worker events
        """
        self.config = config
        self.progress = progress
        self.logger = ByteScopeLogger.get_instance()
        self._state = PipelineState.INITIALIZING

    @property
    def state(self) -> PipelineState:
        return self._state

    def _transition(self, new_state: PipelineState):
        if new_state not in _TRANSITIONS[self._state]:
            raise PipelineStateError(
                f"Illegal pipeline transition: {self._state.value} -> {new_state.value}"
            )
        self.logger.debug(
            "Pipeline state changed",
            extra={"from": self._state.value, "to": new_state.value}
        )
        self._state = new_state

    def validate_root(self) -> str:
        """
        Check that the root directory exists and can be listed.

        Returns:
            The root path as a string

        Raises:
            RootDirectoryError: If the root is missing, not a directory or unlistable
        """
        root = Path(self.config.root_directory).expanduser()

        if not root.exists():
            raise RootDirectoryError(str(root), "directory not found")
        if not root.is_dir():
            raise RootDirectoryError(str(root), "not a directory")
        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise RootDirectoryError(str(root), e.strerror or str(e)) from e

        return str(root)

    def run(self) -> PipelineResult:
        """
        Run discovery, collection and merge.

        Returns:
            Pipeline result holding the total histogram

        Raises:
            RootDirectoryError: If the root directory is invalid
            PipelineStateError: If the coordinator has already run
        """
        if self._state is not PipelineState.INITIALIZING:
            raise PipelineStateError(f"Pipeline already ran (state: {self._state.value})")

        start_time = time.time()
        self.logger.info(
            f"Start research {self.config.root_directory}",
            extra={
                "workers": self.config.worker_count,
                "queue_capacity": self.config.queue_capacity,
            }
        )

        try:
            root = self.validate_root()
        except RootDirectoryError as e:
            self.logger.error(f"Directory {e.path} not usable", extra={"reason": e.reason})
            self._transition(PipelineState.FAILED)
            raise

        if self.progress:
            self.progress.on_scan_start(root)

        paths: ClosableQueue[str] = ClosableQueue(maxsize=self.config.queue_capacity)
        results: ClosableQueue[ByteHistogram] = ClosableQueue()

        pool = HistogramWorkerPool(WorkerConfig(
            worker_count=self.config.worker_count,
            read_buffer_size=self.config.read_buffer_size,
        ))
        walker = DirectoryWalker(exclude=self.config.exclude)
        if self.progress:
            pool.set_callbacks(
                on_file_start=self.progress.on_file_start,
                on_file_complete=self.progress.on_file_complete,
                on_file_error=self.progress.on_file_error,
            )
            walker.on_file_discovered = self.progress.on_file_discovered

        self._transition(PipelineState.COLLECTING)
        pool.start(paths, results)

        try:
            walk_stats = walker.walk(root, paths)
        except BaseException:
            # The pool closes paths itself once every worker has crashed
            paths.close_if_open()
            self._transition(PipelineState.FAILED)
            # Raises ByteScopeError if the walk failed because the workers died
            pool.join()
            raise
        paths.close_if_open()

        if self.progress:
            self.progress.on_discovery_complete()

        self._transition(PipelineState.MERGING)
        total = ByteHistogram()
        partials = 0
        for partial in results:
            merge_into(total, partial)
            partials += 1

        try:
            pool.join()
        except ByteScopeError:
            self._transition(PipelineState.FAILED)
            raise

        duration = time.time() - start_time
        worker_stats = pool.get_stats()

        self.logger.info(
            "Collection complete",
            extra={
                "files_processed": worker_stats["files_processed"],
                "files_failed": worker_stats["files_failed"],
                "bytes": total.total,
                "partials": partials,
                "duration_seconds": round(duration, 2),
            }
        )

        return PipelineResult(
            root=root,
            histogram=total,
            walk_stats=walk_stats,
            worker_stats=worker_stats,
            partials_merged=partials,
            duration_seconds=duration,
        )

    def render(self, result: PipelineResult, renderers: Sequence[Any]) -> RenderOutcome:
        """
        Hand the total histogram to each renderer.

        A failing renderer is logged and recorded; the remaining
        renderers still run.

        Args:
            result: Result returned by run()
            renderers: Objects with a ``name`` and a ``render(result)`` method

        Returns:
            Outputs and errors keyed by renderer name
        """
        self._transition(PipelineState.RENDERING)
        outcome = RenderOutcome()

        for renderer in renderers:
            try:
                outcome.outputs[renderer.name] = renderer.render(result)
            except RenderingError as e:
                outcome.errors[renderer.name] = str(e)
                self.logger.error(
                    f"Renderer {renderer.name} failed",
                    extra={"error": str(e)}
                )

        self._transition(PipelineState.DONE)
        self.logger.info("Quit")
        return outcome

    def execute(
        self, renderers: Sequence[Any] = ()
    ) -> Tuple[PipelineResult, RenderOutcome]:
        """Run the whole pipeline, then render."""
        result = self.run()
        return result, self.render(result, renderers)


def run_pipeline(
    root_directory: str,
    worker_count: int = 4,
    queue_capacity: int = 4,
    exclude: Optional[List[str]] = None,
) -> ByteHistogram:
    """Convenience wrapper: compute the total histogram for a directory tree."""
    config = PipelineConfig(
        root_directory=root_directory,
        worker_count=worker_count,
        queue_capacity=queue_capacity,
        exclude=exclude or [],
    )
    return PipelineCoordinator(config).run().histogram
