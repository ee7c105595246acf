from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.filesize import decimal
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from typing import Protocol

    from .usagemodel import Stats
    from .usagepool import UsageResult

    class _UsageConfig(Protocol):
        @property
        def track_extensions(self) -> bool:
            ...

        @property
        def track_large_files(self) -> bool:
            ...

        @property
        def path_width(self) -> int:
            ...


class UsageReport:
    """Render a usage result to the console."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: _UsageConfig, console: Console | None = None) -> None:
        """
        Initialize the report.

        Args:
            config: Decides which sections are rendered.
            console: Where to render. Defaults to a console on stdout.
        """
        self._config = config
        self._console = console or Console(highlight=False)

    def render(self, result: UsageResult) -> None:
        """Render every enabled section of the result."""
        if self._config.track_large_files and result.largest:
            self.render_largest_files(result)

        self._console.print(f"Total size is {format_total(result.stats)}")

        if self._config.track_extensions and result.stats.by_extension:
            self._console.print()
            self.render_extensions(result.stats)

    def render_largest_files(self, result: UsageResult) -> None:
        """Render the largest files with paths relative to the root."""
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Size", justify="right", no_wrap=True)
        table.add_column("File", no_wrap=True)

        for size_bytes, path in result.largest:
            display_path = truncate(
                relative_path(path, result.root),
                self._config.path_width,
            )
            table.add_row(decimal(size_bytes), Text(display_path))

        self._console.print("Largest files:")
        self._console.print(table)

        self.logger.debug("Rendered %d largest files", len(result.largest))

    def render_extensions(self, stats: Stats) -> None:
        """Render the per-extension breakdown, largest first."""
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Extension", no_wrap=True)
        table.add_column("Count", justify="right", no_wrap=True)
        table.add_column("Size", justify="right", no_wrap=True)

        for extension, usage in stats.sorted_extensions():
            table.add_row(
                Text(extension),
                str(usage.file_count),
                decimal(usage.size_bytes),
            )

        self._console.print(table)

        self.logger.debug("Rendered %d extensions", len(stats.by_extension))


def format_total(stats: Stats) -> str:
    """Return e.g. '1500 bytes (1.5 kB) across 3 items'."""
    return (
        f"{stats.total_bytes} bytes ({decimal(stats.total_bytes)})"
        f" across {stats.file_count} items"
    )


def relative_path(path: str, root: str) -> str:
    """Return path relative to root, or the filename when root is the file."""
    if path == root:
        return os.path.basename(path)

    return os.path.relpath(path, root)


def truncate(path: str, width: int = 80) -> str:
    """Shorten a path longer than width to its head and tail around '...'."""
    if len(path) <= width:
        return path

    mid = min(len(path) // 2, width // 2)
    return f"{path[:mid]}...{path[len(path) - mid:]}"
