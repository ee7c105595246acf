from __future__ import annotations

import logging
import os

from .usageconfig import UsageConfig
from .usageerrors import PathNotFound
from .usageerrors import UnsupportedPathType
from .usagemodel import EntryKind
from .usagemodel import Stats
from .usagemodel import classify_path
from .usagepool import UsagePool
from .usagepool import UsageResult
from .usagereport import UsageReport


class DiskUsage:
    """Measure the disk usage of a file or directory tree and report it."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: UsageConfig) -> None:
        """
        Initialize a new DiskUsage.

        Args:
            config: The configuration to use for every run.
        """
        self._config = config
        self._pool = UsagePool(config)
        self._report = UsageReport(config)

    def run(self, path: str) -> UsageResult:
        """Measure the path and print the report."""
        result = self.measure(path)
        self._report.render(result)
        return result

    def measure(self, path: str) -> UsageResult:
        """
        Measure a single file directly, or a directory with the worker pool.

        Raises:
            PathNotFound
            UnsupportedPathType
            FileMetadataError: The target is a file that cannot be read.
        """
        root = os.path.abspath(path)
        kind = classify_path(root)
        self.logger.debug("Target '%s' is %s", root, kind.value)

        if kind is EntryKind.MISSING:
            raise PathNotFound(path)

        if kind is EntryKind.FILE:
            return self._measure_file(root)

        if kind is EntryKind.DIRECTORY:
            return self._pool.run(root)

        raise UnsupportedPathType(path)

    def _measure_file(self, root: str) -> UsageResult:
        """Measure a target that is a single file."""
        # A symlinked target is sized by what it points at and grouped by the
        # extension of the name given.
        size_bytes = Stats.from_file(os.path.realpath(root)).total_bytes
        stats = Stats.empty(self._config.track_extensions)
        stats.add_size(root, size_bytes)
        largest: list[tuple[int, str]] = []

        if self._config.track_large_files and self._config.top_count:
            largest = [(stats.total_bytes, root)]

        return UsageResult(root=root, stats=stats, largest=largest)
