"""Progress tracking infrastructure."""

from .progress_tracker import ProgressTracker, ScanProgress

__all__ = ["ProgressTracker", "ScanProgress"]
