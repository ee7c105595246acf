from __future__ import annotations

import argparse
import logging
import os

from walk_usage.usage import DiskUsage
from walk_usage.usageconfig import UsageConfig
from walk_usage.usageconfig import write_new_config
from walk_usage.usageerrors import UsageError

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Report the disk usage of a directory tree using parallel workers.",
        epilog="Set the WORKERS environment variable to override the worker count.",
    )
    parser.add_argument(
        "path",
        type=str,
        nargs="?",
        default=None,
        help="The file or folder to measure. Default: current directory.",
    )
    parser.add_argument(
        "-l",
        "--list-large-files",
        help="List the largest files.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "-g",
        "--group-extensions",
        help="Output space usage for each file extension.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="The path to an optional configuration file.",
    )
    parser.add_argument(
        "--make-config",
        help="Create a default configuration file at the --config path.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logging to this file.",
    )
    return parser.parse_args(args)


def add_file_handler_to_logging(log_filepath: str) -> None:
    """Add a file handler to the root logger."""
    file_handler = logging.FileHandler(log_filepath)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.getLogger().addHandler(file_handler)


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)
    logger = logging.getLogger("walk_usage")

    if args.make_config:
        if not args.config:
            logger.error("--make-config requires --config")
            return 2

        write_new_config(args.config)
        return 0

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG if args.debug else logging.WARNING)
    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[stream_handler],
    )

    # The file handler sees everything, stderr only what was asked for.
    root_level = logging.DEBUG if args.debug or args.log_file else logging.WARNING
    logging.getLogger().setLevel(root_level)

    if args.log_file:
        add_file_handler_to_logging(args.log_file)

    try:
        config = UsageConfig(args.config)

        if args.list_large_files:
            config.set_option("report", "large_files", True)
        if args.group_extensions:
            config.set_option("report", "extensions", True)

        config.validate()

    except ValueError as error:
        logger.error("%s", error)
        return 2

    target = args.path if args.path is not None else os.getcwd()
    logger.debug("Searching in path: %s", target)

    try:
        DiskUsage(config).run(target)

    except UsageError as error:
        logger.error("%s", error)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
