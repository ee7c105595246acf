from __future__ import annotations

import itertools
import logging
import os
from pathlib import Path
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from walk_usage.usagemodel import ExtensionUsage
from walk_usage.usagemodel import Stats
from walk_usage.usagepool import UsagePool
from walk_usage.usagepool import WorkerResult
from walk_usage.usagepool import merge_results
from walk_usage.usagetracker import LargestFiles

TREE_TOTAL = 195


def _config(workers: int = 4, **kwargs) -> MagicMock:
    options = {
        "workers": workers,
        "poll_interval": 0.01,
        "track_extensions": True,
        "track_large_files": True,
        "top_count": 3,
    }
    options.update(kwargs)
    return MagicMock(**options)


def test_run_totals_tree(tree: Path) -> None:
    result = UsagePool(_config()).run(str(tree))

    assert result.root == str(tree)
    assert result.stats.total_bytes == TREE_TOTAL
    assert result.stats.file_count == 7
    assert result.directories == 5
    assert result.stats.by_extension == {
        "txt": ExtensionUsage(37, 3),
        "log": ExtensionUsage(5, 1),
        "bin": ExtensionUsage(100, 1),
    }
    assert result.largest == [
        (100, str(tree / "sub1" / "d.bin")),
        (50, str(tree / "sub2" / "f")),
        (20, str(tree / "b.txt")),
    ]


@pytest.mark.parametrize("workers", [1, 2, 3, 8])
def test_run_is_deterministic_across_worker_counts(
    workers: int,
    wide_tree: tuple[Path, int, int],
) -> None:
    root, total, count = wide_tree
    baseline = UsagePool(_config(workers=1)).run(str(root))

    result = UsagePool(_config(workers=workers)).run(str(root))

    assert result.stats.total_bytes == total
    assert result.stats.file_count == count
    assert result.stats == baseline.stats
    assert result.largest == baseline.largest
    assert len(result.largest) == 3


def test_run_repeated_runs_agree(wide_tree: tuple[Path, int, int]) -> None:
    root, total, _ = wide_tree
    pool = UsagePool(_config(workers=6))

    results = [pool.run(str(root)) for _ in range(5)]

    assert {result.stats.total_bytes for result in results} == {total}


def test_run_empty_directory(tmp_path: Path) -> None:
    result = UsagePool(_config()).run(str(tmp_path))

    assert result.stats.total_bytes == 0
    assert result.stats.file_count == 0
    assert result.largest == []
    assert result.directories == 1


def test_run_without_tracking(tree: Path) -> None:
    config = _config(track_extensions=False, track_large_files=False)

    result = UsagePool(config).run(str(tree))

    assert result.stats.total_bytes == TREE_TOTAL
    assert result.stats.by_extension == {}
    assert result.largest == []


def test_run_unreadable_subdirectory(
    tree: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    real_scandir = os.scandir
    blocked = str(tree / "sub1")

    def fake_scandir(path):
        if path == blocked:
            raise PermissionError(13, "Permission denied", path)
        return real_scandir(path)

    with patch("walk_usage.usagescanner.os.scandir", side_effect=fake_scandir):
        with caplog.at_level(logging.WARNING):
            result = UsagePool(_config()).run(str(tree))

    # sub1 and everything below it is excluded, sub2 is counted fully
    assert result.stats.total_bytes == TREE_TOTAL - 110
    assert result.stats.file_count == 4
    assert [r.levelno for r in caplog.records] == [logging.WARNING]
    assert blocked in caplog.text


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permissions are not enforced for root",
)
def test_run_unreadable_subdirectory_permissions(tree: Path) -> None:
    blocked = tree / "sub1"
    blocked.chmod(0)

    try:
        result = UsagePool(_config()).run(str(tree))

    finally:
        blocked.chmod(0o755)

    assert result.stats.total_bytes == TREE_TOTAL - 110


def test_run_propagates_worker_errors(tree: Path) -> None:
    pool = UsagePool(_config(workers=3))
    real_scan = pool._scanner.scan

    def failing_scan(path: str):
        if path.endswith("sub2"):
            raise RuntimeError("boom")
        return real_scan(path)

    with patch.object(pool._scanner, "scan", side_effect=failing_scan):
        with pytest.raises(RuntimeError, match="boom"):
            pool.run(str(tree))


def test_root_is_scanned_before_workers_start(tree: Path) -> None:
    pool = UsagePool(_config(workers=2))

    idle = pool._new_result()
    scan = pool._scanner.scan

    with patch.object(pool, "_worker", return_value=idle) as mock_worker:
        with patch.object(pool._scanner, "scan", wraps=scan) as mock_scan:
            result = pool.run(str(tree))

    mock_scan.assert_called_once_with(str(tree))
    assert mock_worker.call_count == 2
    assert result.stats.file_count == 3


def _partial(files: list[tuple[str, int]]) -> WorkerResult:
    result = WorkerResult(Stats.empty(True), LargestFiles(2))
    for path, size_bytes in files:
        result.stats.add_size(path, size_bytes)
        result.largest.offer(path, size_bytes)
    result.directories = 1
    return result


def test_merge_results_is_order_independent() -> None:
    parts = [
        [("a.txt", 10), ("b.log", 30)],
        [("c.txt", 30)],
        [("d.bin", 1), ("e.txt", 25)],
    ]
    merged = []

    for order in itertools.permutations(parts):
        result = merge_results([_partial(part) for part in order], True, 2)
        snapshot = result.largest.snapshot()
        merged.append((result.stats, snapshot, result.directories))

    assert all(item == merged[0] for item in merged)

    stats, largest, directories = merged[0]
    assert stats.total_bytes == 96
    assert stats.file_count == 5
    assert largest == [(30, "b.log"), (30, "c.txt")]
    assert directories == 3


def test_merge_results_of_nothing() -> None:
    result = merge_results([], False, 10)

    assert result.stats == Stats.empty()
    assert result.largest.snapshot() == []
