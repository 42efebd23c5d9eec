"""Directory-size aggregation on top of the tree walker."""

from __future__ import annotations

import fnmatch
import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, Iterator

from dirsize.core.walker import TreeWalker, absolute
from dirsize.models.entry import DirectoryEntry, ErrorKind, VisitError, WalkAction
from dirsize.models.report import SoftErrorReport
from dirsize.models.scan_result import DirSizeResult, ScanProgress, SubdirSizesResult, TotalResult

log = logging.getLogger(__name__)

ProgressCallback = Callable[[ScanProgress], None]

DEFAULT_PROGRESS_INTERVAL = 1000


class _ProgressTicker:
    """Publishes a snapshot every ``interval`` entries."""

    def __init__(self, callback: ProgressCallback | None, interval: int) -> None:
        self._callback = callback
        self._interval = max(interval, 1)
        self._seen = 0

    def tick(self, entry: DirectoryEntry, bytes_seen: int, errors: int) -> None:
        self._seen += 1
        if self._callback and self._seen % self._interval == 0:
            self._callback(ScanProgress(self._seen, bytes_seen, errors, str(entry.path)))

    def finish(self, bytes_seen: int, errors: int) -> None:
        if self._callback:
            self._callback(ScanProgress(self._seen, bytes_seen, errors, finished=True))


class SizeAggregator:
    """Computes total and per-directory sizes of a tree.

    Each call re-walks the tree; nothing is cached between calls.  Soft
    errors end up in the result's report, a bad root raises
    :class:`~dirsize.core.walker.RootPathError`.
    """

    def __init__(
        self,
        walker: TreeWalker | None = None,
        *,
        exclude: Iterable[str] = (),
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        self.walker = walker or TreeWalker()
        self.exclude = tuple(exclude)
        self.progress_interval = progress_interval

    def compute_total(
        self,
        root: Path | str,
        *,
        cancel: threading.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> TotalResult:
        """Sum the size of every file under *root*, best effort."""
        result = TotalResult(root=absolute(root))
        ticker = _ProgressTicker(on_progress, self.progress_interval)

        def visit(entry: DirectoryEntry) -> WalkAction:
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                return WalkAction.ABORT
            if entry.error is not None:
                self._record(result.report, entry.path, entry.error)
                return WalkAction.CONTINUE
            if self._is_excluded(entry):
                return WalkAction.SKIP_SUBTREE if entry.is_directory else WalkAction.CONTINUE
            if not entry.is_directory:
                result.total_bytes += entry.size
            ticker.tick(entry, result.total_bytes, len(result.report))
            return WalkAction.CONTINUE

        self.walker.run(result.root, visit)
        ticker.finish(result.total_bytes, len(result.report))
        log.info("Total of %s: %d bytes, %d soft errors", result.root, result.total_bytes, len(result.report))
        return result

    def compute_subdir_sizes(
        self,
        root: Path | str,
        max_depth: int = 0,
        *,
        cancel: threading.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> SubdirSizesResult:
        """Cumulative size of every directory under *root*.

        Args:
            root: Directory to scan.
            max_depth: Deepest directory level to report, counted in path
                separators below *root*: children are 0, grandchildren 1.
                0 means unlimited.  Files below the cutoff still count
                towards their reported ancestors.
            cancel: Set to abort the walk between two entries.
            on_progress: Receives periodic :class:`ScanProgress` snapshots.

        Returns:
            Sizes in first-visit order.  The root entry equals the total.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")

        root_path = absolute(root)
        result = SubdirSizesResult(root=root_path, max_depth=max_depth)
        sizes: dict[Path, int] = {}
        ticker = _ProgressTicker(on_progress, self.progress_interval)

        def visit(entry: DirectoryEntry) -> WalkAction:
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                return WalkAction.ABORT
            if entry.error is not None:
                if entry.is_directory and entry.error.kind is ErrorKind.VANISHED:
                    sizes.pop(entry.path, None)
                self._record(result.report, entry.path, entry.error)
                return WalkAction.CONTINUE
            if self._is_excluded(entry):
                return WalkAction.SKIP_SUBTREE if entry.is_directory else WalkAction.CONTINUE

            if entry.is_directory:
                if _within_depth(entry.depth, max_depth):
                    sizes.setdefault(entry.path, 0)
            else:
                result.total_bytes += entry.size
                for ancestor in _ancestors(entry, root_path, max_depth):
                    sizes[ancestor] = sizes.get(ancestor, 0) + entry.size
            ticker.tick(entry, result.total_bytes, len(result.report))
            return WalkAction.CONTINUE

        self.walker.run(root_path, visit)

        result.entries = [DirSizeResult(path=path, total_bytes=size) for path, size in sizes.items()]
        ticker.finish(result.total_bytes, len(result.report))
        log.info(
            "Scanned %s: %d directories, %d bytes, %d soft errors",
            root_path,
            len(result.entries),
            result.total_bytes,
            len(result.report),
        )
        return result

    def _is_excluded(self, entry: DirectoryEntry) -> bool:
        if not self.exclude or entry.depth == 0:
            return False
        return any(fnmatch.fnmatch(entry.path.name, pattern) for pattern in self.exclude)

    @staticmethod
    def _record(report: SoftErrorReport, path: Path, error: VisitError) -> None:
        if error.kind is ErrorKind.VANISHED:
            log.debug("Skipping vanished entry: %s", path)
            return
        report.add(path, error.kind, error.message)


def _within_depth(level: int, max_depth: int) -> bool:
    """Whether a directory *level* segments below the root is reported.

    ``max_depth`` counts separators in the relative path, so level 1 (a
    child of the root) has 0 and the root itself is always reported.
    """
    return not max_depth or level - 1 <= max_depth


def _ancestors(entry: DirectoryEntry, root: Path, max_depth: int) -> Iterator[Path]:
    """Directories from the immediate parent of *entry* up to *root*.

    Ancestry is checked segment by segment, so ``/data2`` is never taken
    for a child of ``/data``.  With ``max_depth`` set, levels below the
    cutoff are skipped but the walk upwards continues.
    """
    level = entry.depth
    for parent in entry.path.parents:
        level -= 1
        if level < 0 or not parent.is_relative_to(root):
            return
        if _within_depth(level, max_depth):
            yield parent
        if parent == root:
            return
