from __future__ import annotations

import argparse
import logging
import os
import random
import shutil
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from walk_usage.usageconfig import UsageConfig
from walk_usage.usagepool import UsagePool

BASE_DIR: Path = Path(__file__).resolve().parent
TEST_DIR: Path = BASE_DIR / "smoketest_tree"
FANOUT_RANGE: tuple[int, int] = (0, 5)
FILE_COUNT_RANGE: tuple[int, int] = (0, 20)
FILE_SIZE_RANGE: tuple[int, int] = (0, 4096)
MAX_DEPTH = 6
WORKER_COUNTS = (1, 2, 4, 8, 16)

logger = logging.getLogger(__name__)


def build_tree(directory: Path, depth: int, rng: random.Random) -> None:
    """Create a random tree of files and directories below directory."""
    directory.mkdir(parents=True, exist_ok=True)

    for idx in range(rng.randint(*FILE_COUNT_RANGE)):
        suffix = rng.choice([".txt", ".log", ".bin", ""])
        (directory / f"file{idx}{suffix}").write_bytes(
            b"x" * rng.randint(*FILE_SIZE_RANGE)
        )

    if depth >= MAX_DEPTH:
        return

    for idx in range(rng.randint(*FANOUT_RANGE)):
        build_tree(directory / f"dir{idx}", depth + 1, rng)


def expected_totals(root: Path) -> tuple[int, int]:
    """Return total bytes and file count using a plain os.walk()."""
    total = 0
    count = 0
    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            total += os.path.getsize(os.path.join(dirpath, filename))
            count += 1
    return total, count


@contextmanager
def smoketest_tree(seed: int) -> Generator[Path, None, None]:
    """Build the smoketest tree and always remove it afterwards."""
    logger.info("Building tree in %s (seed %s)", TEST_DIR, seed)
    build_tree(TEST_DIR, 0, random.Random(seed))
    try:
        yield TEST_DIR
    finally:
        logger.info("Removing %s", TEST_DIR)
        shutil.rmtree(TEST_DIR, ignore_errors=True)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--seed",
        type=int,
        default=1,
        help="Random seed for the tree.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Set the logging level to DEBUG.",
    )
    return parser.parse_args()


def run() -> int:
    """Compare every worker count against os.walk() on a random tree."""
    args = parse_args()
    level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(message)s")

    failures = 0
    with smoketest_tree(args.seed) as root:
        expected = expected_totals(root)
        logger.info("Expecting %s bytes across %s files", *expected)

        for workers in WORKER_COUNTS:
            config = UsageConfig(environ={"WORKERS": str(workers)})
            config.set_option("report", "extensions", True)
            config.set_option("report", "large_files", True)

            tic = time.perf_counter()
            result = UsagePool(config).run(str(root))
            toc = time.perf_counter()

            actual = (result.stats.total_bytes, result.stats.file_count)
            status = "ok" if actual == expected else "MISMATCH"
            failures += actual != expected
            logger.info(
                "%2d workers: %s in %.3f seconds (%s)",
                workers,
                actual,
                toc - tic,
                status,
            )

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(run())
