from __future__ import annotations


class UsageError(Exception):
    """Base class for disk usage errors."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class PathNotFound(UsageError):
    """The target path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(path, f"Invalid path: {path}")


class UnsupportedPathType(UsageError):
    """The target path is neither a regular file nor a directory."""

    def __init__(self, path: str) -> None:
        super().__init__(path, f"Unknown type {path}")


class DirectoryReadError(UsageError):
    """A directory could not be opened or listed during the walk."""

    def __init__(self, path: str, error: OSError) -> None:
        super().__init__(path, f"Error {error} ({path})")
        self.error = error


class FileMetadataError(UsageError):
    """The metadata of a single file could not be read."""

    def __init__(self, path: str, error: OSError) -> None:
        super().__init__(path, f"Cannot read metadata {error} ({path})")
        self.error = error
