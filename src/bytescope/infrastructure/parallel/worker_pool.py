"""Worker pool for parallel byte histogram collection."""

from dataclasses import dataclass, field
from typing import List, Optional, Callable, Dict, Any
import threading
import time

from ...domain.exceptions import ByteScopeError
from ...domain.models.histogram import ByteHistogram
from ..logging import ByteScopeLogger
from .closable_queue import ClosableQueue


@dataclass
class WorkerConfig:
    """Configuration for the worker pool."""
    worker_count: int = 4
    read_buffer_size: int = 64 * 1024

    def __post_init__(self):
        if self.worker_count < 1:
            raise ValueError("worker_count must be >= 1")
        if self.read_buffer_size < 1:
            raise ValueError("read_buffer_size must be >= 1")


@dataclass
class WorkerStats:
    """Counters kept by a single worker."""
    worker_id: int
    files_processed: int = 0
    files_failed: int = 0
    files_truncated: int = 0
    bytes_read: int = 0
    duration_seconds: float = 0.0
    failed_paths: List[str] = field(default_factory=list)


# Type aliases for callbacks
OnFileStartCallback = Callable[[str], None]
OnFileCompleteCallback = Callable[[str, int], None]
OnFileErrorCallback = Callable[[str, str], None]


class FileHistogramWorker:
    """
    Consumes file paths and accumulates one private histogram.

    The histogram is owned by this worker until the path queue is
    exhausted, then it is put on the result collection exactly once.
    Unreadable files are logged and skipped; they never stop the worker.
    """

    def __init__(
        self,
        worker_id: int,
        read_buffer_size: int = 64 * 1024,
        on_file_start: Optional[OnFileStartCallback] = None,
        on_file_complete: Optional[OnFileCompleteCallback] = None,
        on_file_error: Optional[OnFileErrorCallback] = None,
    ):
        self.worker_id = worker_id
        self.read_buffer_size = read_buffer_size
        self.histogram = ByteHistogram()
        self.stats = WorkerStats(worker_id=worker_id)
        self.logger = ByteScopeLogger.get_instance()

        self._on_file_start = on_file_start
        self._on_file_complete = on_file_complete
        self._on_file_error = on_file_error

    def run(
        self,
        paths: ClosableQueue[str],
        results: ClosableQueue[ByteHistogram],
    ) -> ByteHistogram:
        """
        Process paths until the queue is closed and drained, then emit.

        Args:
            paths: Shared file path queue
            results: Result collection receiving this worker's histogram

        Returns:
            The emitted histogram
        """
        start_time = time.time()

        for path in paths:
            self.process_file(path)

        self.stats.duration_seconds = time.time() - start_time
        results.put(self.histogram)

        self.logger.debug(
            f"Worker {self.worker_id} finished",
            extra={
                "files_processed": self.stats.files_processed,
                "files_failed": self.stats.files_failed,
                "bytes_read": self.stats.bytes_read,
            }
        )
        return self.histogram

    def process_file(self, path: str) -> int:
        """
        Count the bytes of one file into the local histogram.

        Args:
            path: File to read

        Returns:
            Number of bytes counted (0 if the file could not be opened)
        """
        self._notify(self._on_file_start, path)

        try:
            handle = open(path, "rb")
        except OSError as e:
            self.stats.files_failed += 1
            self.stats.failed_paths.append(path)
            self.logger.warning(
                f"Cannot open {path}",
                extra={"error": e.strerror or str(e)}
            )
            self._notify(self._on_file_error, path, str(e))
            return 0

        bytes_read = 0
        with handle:
            try:
                while True:
                    chunk = handle.read(self.read_buffer_size)
                    if not chunk:
                        break
                    self.histogram.update(chunk)
                    bytes_read += len(chunk)
            except OSError as e:
                # Bytes counted before the error stay in the histogram
                self.stats.files_truncated += 1
                self.logger.warning(
                    f"Read failed, file truncated: {path}",
                    extra={"error": e.strerror or str(e), "bytes_counted": bytes_read}
                )

        self.stats.files_processed += 1
        self.stats.bytes_read += bytes_read
        self.logger.debug(
            f"Counted {path}",
            extra={"worker": self.worker_id, "bytes": bytes_read}
        )
        self._notify(self._on_file_complete, path, bytes_read)
        return bytes_read

    def _notify(self, callback: Optional[Callable[..., None]], *args):
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            self.logger.warning(f"Progress callback failed: {e}")


class HistogramWorkerPool:
    """
    Runs a fixed number of FileHistogramWorkers on threads.

    A supervisor thread joins every worker and then closes the result
    collection, so a consumer draining the collection stops exactly
    after the last partial histogram has been emitted.
    """

    def __init__(self, config: WorkerConfig):
        """
        Initialize the worker pool.

        Args:
            config: Worker pool configuration
        """
        self.config = config
        self.logger = ByteScopeLogger.get_instance()

        self._workers: List[FileHistogramWorker] = []
        self._threads: List[threading.Thread] = []
        self._supervisor: Optional[threading.Thread] = None
        self._crashed: List[str] = []
        self._crash_lock = threading.Lock()

        # Callbacks
        self._on_file_start: Optional[OnFileStartCallback] = None
        self._on_file_complete: Optional[OnFileCompleteCallback] = None
        self._on_file_error: Optional[OnFileErrorCallback] = None

    def set_callbacks(
        self,
        on_file_start: Optional[OnFileStartCallback] = None,
        on_file_complete: Optional[OnFileCompleteCallback] = None,
        on_file_error: Optional[OnFileErrorCallback] = None,
    ):
        """
        Set callback functions for progress reporting.

        Callbacks run on worker threads and must be thread-safe.

        Args:
            on_file_start: Called before a file is opened
            on_file_complete: Called with the byte count once a file is read
            on_file_error: Called with the error message when a file cannot be opened
        """
        self._on_file_start = on_file_start
        self._on_file_complete = on_file_complete
        self._on_file_error = on_file_error

    @property
    def started(self) -> bool:
        return self._supervisor is not None

    def start(
        self,
        paths: ClosableQueue[str],
        results: ClosableQueue[ByteHistogram],
    ):
        """
        Launch the workers and the supervisor.

        Args:
            paths: Bounded path queue the workers consume
            results: Result collection the workers emit to; closed by the
                supervisor after every worker has terminated
        """
        if self.started:
            raise ByteScopeError("worker pool already started")

        self.logger.info(
            "Starting worker pool",
            extra={
                "workers": self.config.worker_count,
                "queue_capacity": paths.maxsize,
            }
        )

        for worker_id in range(self.config.worker_count):
            worker = FileHistogramWorker(
                worker_id=worker_id,
                read_buffer_size=self.config.read_buffer_size,
                on_file_start=self._on_file_start,
                on_file_complete=self._on_file_complete,
                on_file_error=self._on_file_error,
            )
            thread = threading.Thread(
                target=self._run_worker,
                args=(worker, paths, results),
                name=f"histogram-worker-{worker_id}",
                daemon=True,
            )
            self._workers.append(worker)
            self._threads.append(thread)

        for thread in self._threads:
            thread.start()

        self._supervisor = threading.Thread(
            target=self._supervise,
            args=(paths, results),
            name="histogram-supervisor",
            daemon=True,
        )
        self._supervisor.start()

    def join(self, timeout: Optional[float] = None):
        """
        Wait until every worker has finished and the results are closed.

        Raises:
            ByteScopeError: If a worker terminated with an unexpected exception
        """
        if self._supervisor is None:
            raise ByteScopeError("worker pool not started")
        self._supervisor.join(timeout)

        if self._crashed:
            raise ByteScopeError(
                f"{len(self._crashed)} worker(s) terminated unexpectedly: "
                + "; ".join(self._crashed)
            )

    def _run_worker(
        self,
        worker: FileHistogramWorker,
        paths: ClosableQueue[str],
        results: ClosableQueue[ByteHistogram],
    ):
        try:
            worker.run(paths, results)
        except Exception as e:
            with self._crash_lock:
                self._crashed.append(f"worker {worker.worker_id}: {e}")
            self.logger.error(
                f"Worker {worker.worker_id} crashed",
                extra={"error": str(e)},
                exc_info=True
            )
            raise

    def _supervise(
        self,
        paths: ClosableQueue[str],
        results: ClosableQueue[ByteHistogram],
    ):
        for thread in self._threads:
            thread.join()
        # Workers only stop normally once paths is closed, so this closes it
        # only when every worker crashed; a walker blocked on put() then fails
        if paths.close_if_open():
            self.logger.error(
                "All workers terminated, closing the path queue",
                extra={"crashed": len(self._crashed)}
            )
        results.close()

    def get_worker_stats(self) -> List[WorkerStats]:
        return [worker.stats for worker in self._workers]

    def get_stats(self) -> Dict[str, Any]:
        """
        Get worker pool statistics.

        Returns:
            Dictionary with statistics aggregated over all workers
        """
        stats = self.get_worker_stats()
        return {
            "workers": len(stats),
            "files_processed": sum(s.files_processed for s in stats),
            "files_failed": sum(s.files_failed for s in stats),
            "files_truncated": sum(s.files_truncated for s in stats),
            "bytes_read": sum(s.bytes_read for s in stats),
            "failed_paths": [p for s in stats for p in s.failed_paths],
        }
