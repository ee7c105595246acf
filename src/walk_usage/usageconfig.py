from __future__ import annotations

import logging
import os
from configparser import ConfigParser
from typing import Mapping

WORKERS_ENV = "WORKERS"

NEW_CONFIG = """\
[scan]
# Number of worker threads. The WORKERS environment variable takes precedence.
# Defaults to the number of logical cores when not set.
# workers = 8
# How long an idle worker waits on the queue before checking for completion.
poll_interval_ms = 50

[report]
# List the largest files and how many of them.
large_files = false
top_count = 10
# Break the total down by file extension.
extensions = false
# Paths longer than this are shortened to head...tail.
path_width = 80
"""


class UsageConfig:
    """Configuration for a disk usage run."""

    logger = logging.getLogger("walk_usage.UsageConfig")

    def __init__(
        self,
        filepath: str | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """
        Load the configuration from the given file, if any.

        Args:
            filepath: Optional path to an INI file. Defaults apply to anything
                the file does not set.

        Keyword Args:
            environ: Environment used for the worker count override. Defaults
                to os.environ.
        """
        self._config = ConfigParser()
        self._environ = os.environ if environ is None else environ

        if filepath is not None:
            success = self._config.read(filepath)

            if not success:
                raise ValueError(f"Could not read config file at {filepath}")

            self.logger.debug("Loaded config from %s", filepath)

    def set_option(self, section: str, option: str, value: object) -> None:
        """Override a single option, creating the section if needed."""
        if not self._config.has_section(section):
            self._config.add_section(section)

        if isinstance(value, bool):
            value = "true" if value else "false"

        self._config.set(section, option, str(value))

    @property
    def workers(self) -> int:
        """
        Return the worker count.

        The WORKERS environment variable wins over the config file, which wins
        over the logical core count.
        """
        override = self._environ.get(WORKERS_ENV)

        if override is not None:
            try:
                workers = int(override)
            except ValueError:
                raise ValueError(
                    f"{WORKERS_ENV} must be an integer, got {override!r}"
                ) from None

        else:
            workers = self._config.getint(
                "scan", "workers", fallback=os.cpu_count() or 1
            )

        if workers < 1:
            raise ValueError(f"Worker count must be positive, got {workers}")

        return workers

    @property
    def poll_interval(self) -> float:
        """Return the queue poll interval in seconds."""
        interval_ms = self._config.getint("scan", "poll_interval_ms", fallback=50)

        if interval_ms <= 0:
            raise ValueError(f"poll_interval_ms must be positive, got {interval_ms}")

        return interval_ms / 1000

    @property
    def track_large_files(self) -> bool:
        """Return whether to track the largest files."""
        return self._config.getboolean("report", "large_files", fallback=False)

    @property
    def track_extensions(self) -> bool:
        """Return whether to break usage down by extension."""
        return self._config.getboolean("report", "extensions", fallback=False)

    @property
    def top_count(self) -> int:
        """Return how many of the largest files to keep."""
        top_count = self._config.getint("report", "top_count", fallback=10)

        if top_count < 0:
            raise ValueError(f"top_count cannot be negative, got {top_count}")

        return top_count

    @property
    def path_width(self) -> int:
        """Return the display width for file paths."""
        path_width = self._config.getint("report", "path_width", fallback=80)

        if path_width < 1:
            raise ValueError(f"path_width must be positive, got {path_width}")

        return path_width

    def validate(self) -> None:
        """
        Read every option once so a bad value fails before any scan starts.

        Raises:
            ValueError
        """
        for option in (
            "workers",
            "poll_interval",
            "track_large_files",
            "track_extensions",
            "top_count",
            "path_width",
        ):
            value = getattr(self, option)
            self.logger.debug("Option %s = %s", option, value)


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    with open(filename, "w") as config_file:
        config_file.write(NEW_CONFIG)
