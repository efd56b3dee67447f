"""Domain models."""

from .histogram import (
    BYTE_VALUES,
    ByteHistogram,
    merge_histograms,
    merge_into,
)

__all__ = [
    "BYTE_VALUES",
    "ByteHistogram",
    "merge_histograms",
    "merge_into",
]
