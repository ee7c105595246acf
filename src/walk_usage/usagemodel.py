from __future__ import annotations

import dataclasses
import enum
import os
import stat

from .usageerrors import FileMetadataError


class EntryKind(enum.Enum):
    """Classification of a path or directory entry."""

    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"
    MISSING = "missing"


@dataclasses.dataclass(frozen=True)
class ExtensionUsage:
    """Bytes and file count for one file extension."""

    size_bytes: int = 0
    file_count: int = 0

    def __add__(self, other: ExtensionUsage) -> ExtensionUsage:
        return ExtensionUsage(
            self.size_bytes + other.size_bytes,
            self.file_count + other.file_count,
        )


@dataclasses.dataclass
class Stats:
    """Aggregate size and count of the files folded in so far."""

    total_bytes: int = 0
    file_count: int = 0
    by_extension: dict[str, ExtensionUsage] = dataclasses.field(default_factory=dict)
    track_extensions: bool = False

    @classmethod
    def empty(cls, track_extensions: bool = False) -> Stats:
        """Return zeroed stats. Extension tracking is fixed here."""
        return cls(track_extensions=track_extensions)

    @classmethod
    def from_file(cls, path: str, track_extensions: bool = False) -> Stats:
        """
        Build stats holding a single file.

        Raises:
            FileMetadataError
        """
        stats = cls.empty(track_extensions)
        stats.add_file(path)
        return stats

    def add_file(self, path: str) -> int:
        """
        Read the size of a file and fold it in. Returns the size in bytes.

        Nothing is folded in if the metadata cannot be read.

        Raises:
            FileMetadataError
        """
        try:
            size_bytes = os.stat(path, follow_symlinks=False).st_size
        except OSError as error:
            raise FileMetadataError(path, error) from error

        self.add_size(path, size_bytes)
        return size_bytes

    def add_size(self, path: str, size_bytes: int) -> None:
        """Fold in a file whose size is already known."""
        self.total_bytes += size_bytes
        self.file_count += 1

        if not self.track_extensions:
            return

        extension = extension_of(path)
        if extension:
            current = self.by_extension.get(extension, ExtensionUsage())
            self.by_extension[extension] = current + ExtensionUsage(size_bytes, 1)

    def merge(self, other: Stats) -> None:
        """Add the totals and extension map of other into these stats."""
        self.total_bytes += other.total_bytes
        self.file_count += other.file_count
        self.track_extensions = self.track_extensions or other.track_extensions

        for extension, usage in other.by_extension.items():
            current = self.by_extension.get(extension, ExtensionUsage())
            self.by_extension[extension] = current + usage

    def copy(self) -> Stats:
        """Return an independent copy of these stats."""
        return dataclasses.replace(self, by_extension=dict(self.by_extension))

    def sorted_extensions(self) -> list[tuple[str, ExtensionUsage]]:
        """Return the extension map sorted by size descending, then by name."""
        return sorted(
            self.by_extension.items(),
            key=lambda item: (-item[1].size_bytes, item[0]),
        )


def extension_of(path: str) -> str:
    """Return the final suffix of the filename without the dot, or ""."""
    _, suffix = os.path.splitext(os.path.basename(path))
    return suffix[1:]


def classify_entry(entry: os.DirEntry[str]) -> EntryKind:
    """
    Classify a directory entry without following symlinks.

    Symlinks are OTHER whatever they point at.

    Raises:
        OSError
    """
    if entry.is_symlink():
        return EntryKind.OTHER

    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE

    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY

    return EntryKind.OTHER


def classify_path(path: str) -> EntryKind:
    """Classify a target path, following a symlink at the path itself."""
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return EntryKind.MISSING

    if stat.S_ISREG(mode):
        return EntryKind.FILE

    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY

    return EntryKind.OTHER
