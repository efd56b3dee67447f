"""Byte histogram domain model."""

from typing import Dict, Iterable, List, Tuple

import numpy as np

# One counter per possible byte value
BYTE_VALUES = 256

# 64-bit unsigned counters are wide enough for any realistic corpus
COUNTER_DTYPE = np.uint64


class ByteHistogram:
    """
    Fixed-size counter array indexed by byte value (0-255).

    A histogram is owned by exactly one worker while it is being
    filled. Once emitted it is only read or merged into a total.
    """

    __slots__ = ("_counts",)

    def __init__(self):
        self._counts = np.zeros(BYTE_VALUES, dtype=COUNTER_DTYPE)

    def increment(self, byte_value: int) -> None:
        """Increment the counter for a single byte value."""
        if not 0 <= byte_value < BYTE_VALUES:
            raise ValueError(f"byte value out of range: {byte_value}")
        self._counts[byte_value] += 1

    def update(self, data: bytes) -> None:
        """
        Count every byte of a buffer.

        Equivalent to calling increment() once per byte, vectorised.
        """
        if not data:
            return
        values = np.frombuffer(data, dtype=np.uint8)
        self._counts += np.bincount(values, minlength=BYTE_VALUES).astype(COUNTER_DTYPE)

    def merge(self, other: "ByteHistogram") -> "ByteHistogram":
        """Add another histogram's counters into this one and return self."""
        self._counts += other._counts
        return self

    def copy(self) -> "ByteHistogram":
        clone = ByteHistogram()
        clone._counts[:] = self._counts
        return clone

    @property
    def counts(self) -> List[int]:
        """Counters as plain Python ints (copy)."""
        return [int(c) for c in self._counts]

    @property
    def total(self) -> int:
        """Sum of all counters, i.e. number of bytes counted."""
        return int(self._counts.sum())

    @property
    def distinct_values(self) -> int:
        """Number of byte values seen at least once."""
        return int(np.count_nonzero(self._counts))

    def most_common(self, n: int = 10) -> List[Tuple[int, int]]:
        """
        Return the n most frequent byte values.

        Ties are broken by ascending byte value. Zero counters are omitted.
        """
        order = sorted(range(BYTE_VALUES), key=lambda b: (-int(self._counts[b]), b))
        return [(b, int(self._counts[b])) for b in order[:n] if self._counts[b] > 0]

    def as_array(self) -> np.ndarray:
        """Read-only view of the counters."""
        view = self._counts.view()
        view.flags.writeable = False
        return view

    def to_dict(self) -> Dict[str, object]:
        return {"total_bytes": self.total, "counts": self.counts}

    def __getitem__(self, byte_value: int) -> int:
        return int(self._counts[byte_value])

    def __len__(self) -> int:
        return BYTE_VALUES

    def __iter__(self):
        return iter(self.counts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByteHistogram):
            return NotImplemented
        return bool(np.array_equal(self._counts, other._counts))

    def __repr__(self) -> str:
        return f"<ByteHistogram total={self.total} distinct={self.distinct_values}>"


def merge_into(total: ByteHistogram, partial: ByteHistogram) -> ByteHistogram:
    """
    Element-wise add a partial histogram into a running total.

    Commutative and associative, so partials may be merged in any order.
    """
    return total.merge(partial)


def merge_histograms(partials: Iterable[ByteHistogram]) -> ByteHistogram:
    """Fold any number of partial histograms into a new total."""
    total = ByteHistogram()
    for partial in partials:
        merge_into(total, partial)
    return total
