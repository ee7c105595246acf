from __future__ import annotations

import dataclasses
import logging
import os
from typing import TYPE_CHECKING

from .usageerrors import DirectoryReadError
from .usageerrors import FileMetadataError
from .usagemodel import EntryKind
from .usagemodel import Stats
from .usagemodel import classify_entry
from .usagetracker import LargestFiles

if TYPE_CHECKING:
    from typing import Protocol

    class _UsageConfig(Protocol):
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
class DirectoryScan:
    """What a single directory contributed, plus the directories found in it."""

    stats: Stats
    largest: LargestFiles
    children: list[str] = dataclasses.field(default_factory=list)


class DirectoryScanner:
    """Read the immediate entries of one directory at a time."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        track_extensions: bool = False,
        track_large_files: bool = False,
        capacity: int = 10,
    ) -> None:
        self._track_extensions = track_extensions
        self._track_large_files = track_large_files
        self._capacity = capacity

    @classmethod
    def from_config(cls, config: _UsageConfig) -> DirectoryScanner:
        """Build a DirectoryScanner from the given configuration."""
        return cls(
            track_extensions=config.track_extensions,
            track_large_files=config.track_large_files,
            capacity=config.top_count,
        )

    def empty_scan(self) -> DirectoryScan:
        """Return a scan result with nothing in it."""
        return DirectoryScan(
            Stats.empty(self._track_extensions),
            LargestFiles(self._capacity if self._track_large_files else 0),
        )

    def scan(self, path: str) -> DirectoryScan:
        """
        Fold the files of a directory and collect its subdirectories.

        Does not recurse. Unreadable files and directories are logged as
        warnings and contribute nothing.
        """
        result = self.empty_scan()

        try:
            with os.scandir(path) as entries:
                for entry in entries:
                    self._fold_entry(entry, result)

        except OSError as error:
            self._warn(DirectoryReadError(path, error))

        return result

    def _fold_entry(self, entry: os.DirEntry[str], result: DirectoryScan) -> None:
        """Fold one directory entry into the result."""
        try:
            kind = classify_entry(entry)
        except OSError as error:
            self._warn(FileMetadataError(entry.path, error))
            return

        if kind is EntryKind.FILE:
            try:
                size_bytes = result.stats.add_file(entry.path)
            except FileMetadataError as error:
                self._warn(error)
                return

            if self._track_large_files:
                result.largest.offer(entry.path, size_bytes)

        elif kind is EntryKind.DIRECTORY:
            result.children.append(entry.path)

        else:
            # Symlinks are not followed, devices and sockets have no usage.
            self.logger.debug("Skipping '%s'", entry.path)

    def _warn(self, error: Exception) -> None:
        self.logger.warning("%s", error)
