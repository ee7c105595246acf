from __future__ import annotations

import dataclasses
import functools
import logging
import queue
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING
from typing import Iterable

from .usagemodel import Stats
from .usagequeue import QueueClosed
from .usagequeue import WorkQueue
from .usagescanner import DirectoryScan
from .usagescanner import DirectoryScanner
from .usagetracker import LargestFiles

if TYPE_CHECKING:
    from typing import Protocol

    class _UsageConfig(Protocol):
        @property
        def workers(self) -> int:
            ...

        @property
        def poll_interval(self) -> float:
            ...

        @property
        def track_extensions(self) -> bool:
            ...

        @property
        def track_large_files(self) -> bool:
            ...

        @property
        def top_count(self) -> int:
            ...


@dataclasses.dataclass
class WorkerResult:
    """Everything one worker folded in during its run."""

    stats: Stats
    largest: LargestFiles
    directories: int = 0

    @classmethod
    def empty(cls, track_extensions: bool, capacity: int) -> WorkerResult:
        return cls(Stats.empty(track_extensions), LargestFiles(capacity))

    def fold(self, scan: DirectoryScan) -> None:
        """Fold the result of one directory scan in."""
        self.stats.merge(scan.stats)
        self.largest.merge(scan.largest)
        self.directories += 1

    def merge(self, other: WorkerResult) -> WorkerResult:
        """Merge other into this result and return it, for use with reduce."""
        self.stats.merge(other.stats)
        self.largest.merge(other.largest)
        self.directories += other.directories
        return self


@dataclasses.dataclass(frozen=True)
class UsageResult:
    """The final answer of a disk usage run."""

    root: str
    stats: Stats
    largest: list[tuple[int, str]] = dataclasses.field(default_factory=list)
    directories: int = 0


def merge_results(
    results: Iterable[WorkerResult],
    track_extensions: bool,
    capacity: int,
) -> WorkerResult:
    """Combine partial results. The outcome does not depend on their order."""
    return functools.reduce(
        WorkerResult.merge,
        results,
        WorkerResult.empty(track_extensions, capacity),
    )


class UsagePool:
    """Walk a directory tree with a fixed pool of worker threads."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: _UsageConfig) -> None:
        """
        Initialize a new UsagePool.

        Args:
            config: The configuration to use. The worker count is read once
                per run.
        """
        self._config = config
        self._scanner = DirectoryScanner.from_config(config)

    @property
    def _capacity(self) -> int:
        return self._config.top_count if self._config.track_large_files else 0

    def run(self, root: str) -> UsageResult:
        """
        Compute the usage of every file below root.

        Args:
            root: An existing directory.

        Returns:
            The merged totals and, when tracked, the largest files.
        """
        workers = self._config.workers
        work_queue = WorkQueue(self._config.poll_interval)

        self.logger.info("Scanning %s with %s workers...", root, workers)
        tic = time.perf_counter()

        results: list[WorkerResult] = []

        with ThreadPoolExecutor(workers, thread_name_prefix="walk_usage") as pool:
            with work_queue.open_producer() as producer:
                # Scan the root before any worker pulls so the queue is seeded.
                root_result = self._new_result()
                root_scan = self._scanner.scan(root)
                root_result.fold(root_scan)
                results.append(root_result)

                for child in root_scan.children:
                    producer.put(child)

                futures = [
                    pool.submit(self._worker, idx, work_queue)
                    for idx in range(1, workers + 1)
                ]

            # Raises the first worker error, once every worker has finished.
            results.extend(future.result() for future in futures)

        merged = merge_results(
            results,
            self._config.track_extensions,
            self._capacity,
        )

        toc = time.perf_counter()
        self.logger.info("Scan finished in %s seconds", toc - tic)
        self.logger.info(
            "Detected %s files in %s directories",
            merged.stats.file_count,
            merged.directories,
        )

        return UsageResult(
            root=root,
            stats=merged.stats,
            largest=merged.largest.snapshot(),
            directories=merged.directories,
        )

    def _new_result(self) -> WorkerResult:
        return WorkerResult.empty(self._config.track_extensions, self._capacity)

    def _worker(self, idx: int, work_queue: WorkQueue) -> WorkerResult:
        """Pull and scan directories until the queue is drained."""
        result = self._new_result()

        while True:
            try:
                path = work_queue.get()
            except queue.Empty:
                continue
            except QueueClosed:
                break

            try:
                scan = self._scanner.scan(path)
                result.fold(scan)

                for child in scan.children:
                    work_queue.put(child)

            finally:
                work_queue.task_done()

        self.logger.debug(
            "Worker %s done after %s directories", idx, result.directories
        )
        return result
