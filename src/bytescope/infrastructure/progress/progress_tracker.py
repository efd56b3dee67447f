"""Thread-safe progress tracking for a histogram run."""

from dataclasses import dataclass, replace
from typing import Optional, Dict, Any
from datetime import datetime
import threading

from ..logging import ByteScopeLogger


@dataclass
class ScanProgress:
    """Overall scan progress information."""
    root: str = ""
    files_discovered: int = 0
    files_completed: int = 0
    files_failed: int = 0
    bytes_read: int = 0
    discovery_done: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    current_file: Optional[str] = None

    @property
    def files_pending(self) -> int:
        return self.files_discovered - self.files_completed - self.files_failed

    @property
    def progress_percent(self) -> Optional[float]:
        """Percent of discovered files handled; None until discovery finishes."""
        if not self.discovery_done:
            return None
        if self.files_discovered == 0:
            return 100.0
        return ((self.files_completed + self.files_failed) / self.files_discovered) * 100

    @property
    def elapsed_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.completed_at or datetime.now()
        return (end - self.started_at).total_seconds()


class ProgressTracker:
    """
    Collects progress events from the walker and the worker threads.

    All event handlers take the internal lock, so they can be passed
    directly as worker pool and walker callbacks.
    """

    def __init__(self):
        self._progress = ScanProgress()
        self._lock = threading.Lock()
        self.logger = ByteScopeLogger.get_instance()

    def on_scan_start(self, root: str):
        """
        Called when a run starts.

        Args:
            root: Directory being scanned
        """
        with self._lock:
            self._progress = ScanProgress(root=root, started_at=datetime.now())

    def on_file_discovered(self, file_path: str):
        with self._lock:
            self._progress.files_discovered += 1

    def on_discovery_complete(self):
        with self._lock:
            self._progress.discovery_done = True

    def on_file_start(self, file_path: str):
        with self._lock:
            self._progress.current_file = file_path

    def on_file_complete(self, file_path: str, bytes_read: int):
        """
        Called when a file has been read.

        Args:
            file_path: Path of the file
            bytes_read: Number of bytes counted from it
        """
        with self._lock:
            self._progress.files_completed += 1
            self._progress.bytes_read += bytes_read
            if self._progress.current_file == file_path:
                self._progress.current_file = None

    def on_file_error(self, file_path: str, error: str):
        with self._lock:
            self._progress.files_failed += 1
            if self._progress.current_file == file_path:
                self._progress.current_file = None

    def on_scan_complete(self) -> ScanProgress:
        """
        Called when the run is complete.

        Returns:
            Final progress snapshot
        """
        with self._lock:
            self._progress.completed_at = datetime.now()
            self._progress.current_file = None
            final = replace(self._progress)

        self.logger.info(
            "Scan complete",
            extra={
                "files_completed": final.files_completed,
                "files_failed": final.files_failed,
                "bytes_read": final.bytes_read,
                "elapsed_seconds": round(final.elapsed_seconds, 2),
            }
        )
        return final

    def snapshot(self) -> ScanProgress:
        """Return a copy of the current progress."""
        with self._lock:
            return replace(self._progress)

    def get_progress(self) -> Dict[str, Any]:
        """
        Get current scan progress.

        Returns:
            Dictionary with progress information
        """
        progress = self.snapshot()
        percent = progress.progress_percent
        return {
            "root": progress.root,
            "files_discovered": progress.files_discovered,
            "files_completed": progress.files_completed,
            "files_failed": progress.files_failed,
            "files_pending": progress.files_pending,
            "bytes_read": progress.bytes_read,
            "progress_percent": round(percent, 1) if percent is not None else None,
            "current_file": progress.current_file,
        }
