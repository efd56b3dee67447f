"""Directory tree discovery feeding the file path queue."""

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple
import os

from ...domain.exceptions import RootDirectoryError
from ..logging import ByteScopeLogger
from ..parallel.closable_queue import ClosableQueue

OnFileDiscoveredCallback = Callable[[str], None]


@dataclass
class WalkStats:
    """Statistics from one directory walk."""
    directories_visited: int = 0
    directories_skipped: int = 0
    files_discovered: int = 0
    entries_excluded: int = 0
    entries_unreadable: int = 0
    skipped_directories: List[str] = field(default_factory=list)


def list_directory(path: str) -> List[os.DirEntry]:
    """
    List a directory's entries sorted by name.

    Raises:
        OSError: If the directory cannot be listed
    """
    with os.scandir(path) as it:
        return sorted(it, key=lambda entry: entry.name)


class DirectoryWalker:
    """
    Enumerates every non-directory entry under a root.

    Traversal is depth-first in name order using an explicit stack of
    directory iterators, so nesting depth is not limited by the Python
    recursion limit. Symlinks are never followed into directories; they
    are queued like files. Pushing onto a full queue blocks the walker.
    """

    def __init__(
        self,
        exclude: Optional[Sequence[str]] = None,
        on_file_discovered: Optional[OnFileDiscoveredCallback] = None,
    ):
        """
        Initialize the walker.

        Args:
            exclude: Glob patterns matched against entry names and root-relative paths
            on_file_discovered: Called with each queued path
        """
        self.exclude = list(exclude or [])
        self.on_file_discovered = on_file_discovered
        self.logger = ByteScopeLogger.get_instance()

    def walk(self, root: str, queue: ClosableQueue[str]) -> WalkStats:
        """
        Push every file path under root onto the queue.

        Unreadable subdirectories are logged and skipped. The queue is not
        closed here; closing is the caller's responsibility.

        Args:
            root: Directory to traverse
            queue: Bounded path queue

        Returns:
            Walk statistics

        Raises:
            RootDirectoryError: If the root itself cannot be listed
        """
        stats = WalkStats()

        try:
            root_entries = list_directory(root)
        except OSError as e:
            raise RootDirectoryError(root, e.strerror or str(e)) from e

        stats.directories_visited += 1
        stack: List[Tuple[str, Iterator[os.DirEntry]]] = [(root, iter(root_entries))]

        while stack:
            _, entries = stack[-1]
            entry = next(entries, None)
            if entry is None:
                stack.pop()
                continue

            if self._is_excluded(root, entry):
                stats.entries_excluded += 1
                continue

            try:
                is_directory = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                stats.entries_unreadable += 1
                self.logger.warning(
                    f"Cannot stat {entry.path}, skipping",
                    extra={"error": e.strerror or str(e)}
                )
                continue

            if is_directory:
                try:
                    children = list_directory(entry.path)
                except OSError as e:
                    stats.directories_skipped += 1
                    stats.skipped_directories.append(entry.path)
                    self.logger.warning(
                        f"Cannot read directory {entry.path}, skipping subtree",
                        extra={"error": e.strerror or str(e)}
                    )
                    continue
                stats.directories_visited += 1
                stack.append((entry.path, iter(children)))
            else:
                queue.put(entry.path)
                stats.files_discovered += 1
                if self.on_file_discovered:
                    try:
                        self.on_file_discovered(entry.path)
                    except Exception as e:
                        self.logger.warning(f"Discovery callback failed: {e}")

        self.logger.info(
            "Discovery complete",
            extra={
                "root": root,
                "files": stats.files_discovered,
                "directories": stats.directories_visited,
                "skipped_directories": stats.directories_skipped,
            }
        )
        return stats

    def _is_excluded(self, root: str, entry: os.DirEntry) -> bool:
        if not self.exclude:
            return False
        relative = Path(os.path.relpath(entry.path, root)).as_posix()
        return any(
            fnmatch(entry.name, pattern) or fnmatch(relative, pattern)
            for pattern in self.exclude
        )
