"""File discovery infrastructure."""

from .directory_walker import DirectoryWalker, WalkStats, list_directory

__all__ = ["DirectoryWalker", "WalkStats", "list_directory"]
