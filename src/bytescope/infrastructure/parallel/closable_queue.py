"""Closable FIFO conduit used between pipeline stages."""

from collections import deque
from typing import Deque, Generic, Iterator, TypeVar
import threading

from ...domain.exceptions import QueueClosedError

T = TypeVar("T")


class ClosableQueue(Generic[T]):
    """
    Thread-safe FIFO with an explicit close.

    With ``maxsize > 0`` the queue is bounded: put() blocks while it is
    full, which throttles the producer to the consumers' pace. With
    ``maxsize == 0`` it is unbounded and put() never blocks.

    After close(), put() raises QueueClosedError; get() keeps returning
    the remaining items and raises QueueClosedError once drained.
    Iterating the queue yields items until it is closed and empty.
    """

    def __init__(self, maxsize: int = 0):
        if maxsize < 0:
            raise ValueError("maxsize must be >= 0")
        self._maxsize = maxsize
        self._items: Deque[T] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def qsize(self) -> int:
        with self._lock:
            return len(self._items)

    def __len__(self) -> int:
        return self.qsize()

    def put(self, item: T) -> None:
        """
        Append an item, blocking while a bounded queue is full.

        Raises:
            QueueClosedError: If the queue is (or becomes) closed
        """
        with self._not_full:
            if self._closed:
                raise QueueClosedError("put on closed queue")
            while self._maxsize > 0 and len(self._items) >= self._maxsize:
                self._not_full.wait()
                if self._closed:
                    raise QueueClosedError("queue closed while waiting to put")
            self._items.append(item)
            self._not_empty.notify()

    def get(self) -> T:
        """
        Remove and return the oldest item, blocking while the queue is empty.

        Raises:
            QueueClosedError: If the queue is closed and drained
        """
        with self._not_empty:
            while not self._items and not self._closed:
                self._not_empty.wait()
            if not self._items:
                raise QueueClosedError("queue closed and drained")
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self) -> None:
        """
        Close the queue. Must be called exactly once.

        Wakes every blocked consumer so it can drain and stop.

        Raises:
            QueueClosedError: If the queue was already closed
        """
        with self._lock:
            if self._closed:
                raise QueueClosedError("queue already closed")
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def close_if_open(self) -> bool:
        """Close the queue unless already closed; return True if this call closed it."""
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()
            return True

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except QueueClosedError:
                return

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ClosableQueue {state} size={len(self._items)} maxsize={self._maxsize}>"
