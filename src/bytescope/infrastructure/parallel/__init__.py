"""Parallel processing infrastructure for concurrent histogram collection."""

from .closable_queue import ClosableQueue
from .worker_pool import (
    FileHistogramWorker,
    HistogramWorkerPool,
    WorkerConfig,
    WorkerStats,
)

__all__ = [
    "ClosableQueue",
    "FileHistogramWorker",
    "HistogramWorkerPool",
    "WorkerConfig",
    "WorkerStats",
]
