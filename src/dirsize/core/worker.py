"""Background scan job for interactive callers."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from dirsize.core.aggregator import SizeAggregator
from dirsize.models.scan_result import ScanProgress, SubdirSizesResult

log = logging.getLogger(__name__)


class ScanJob:
    """Runs one subdirectory-size scan on a worker thread.

    The traversal itself stays single-threaded.  The foreground only reads
    the last published :class:`ScanProgress` snapshot and may request
    cooperative cancellation.
    """

    def __init__(self, aggregator: SizeAggregator, root: Path | str, max_depth: int = 0) -> None:
        self.aggregator = aggregator
        self.root = root
        self.max_depth = max_depth
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._snapshot = ScanProgress()
        self._executor: ThreadPoolExecutor | None = None
        self._future: Future[SubdirSizesResult] | None = None

    def start(self) -> Future[SubdirSizesResult]:
        if self._future is not None:
            raise RuntimeError("Scan job already started")
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dirsize-scan")
        self._future = self._executor.submit(self._run)
        self._executor.shutdown(wait=False)
        return self._future

    def _run(self) -> SubdirSizesResult:
        log.debug("Background scan of %s started", self.root)
        return self.aggregator.compute_subdir_sizes(
            self.root,
            self.max_depth,
            cancel=self._cancel,
            on_progress=self._publish,
        )

    def _publish(self, progress: ScanProgress) -> None:
        with self._lock:
            self._snapshot = progress

    @property
    def snapshot(self) -> ScanProgress:
        with self._lock:
            return self._snapshot

    def cancel(self) -> None:
        """Ask the running scan to stop at the next entry."""
        log.debug("Cancellation requested for scan of %s", self.root)
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def result(self, timeout: float | None = None) -> SubdirSizesResult:
        """Wait for the scan and return its result (re-raises fatal errors)."""
        if self._future is None:
            raise RuntimeError("Scan job not started")
        return self._future.result(timeout=timeout)
