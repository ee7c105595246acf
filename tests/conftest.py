from __future__ import annotations

from pathlib import Path

import pytest

# relative path -> size in bytes
TREE_FILES = {
    "a.txt": 10,
    "b.txt": 20,
    "c.log": 5,
    "sub1/d.bin": 100,
    "sub1/.hidden": 3,
    "sub1/deep/e.txt": 7,
    "sub2/f": 50,
}
TREE_DIRECTORIES = ["sub1", "sub1/deep", "sub2", "empty"]
TREE_TOTAL = sum(TREE_FILES.values())


def write_file(path: Path, size_bytes: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size_bytes)
    return path


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A small tree with nested, empty and dot-prefixed entries."""
    root = tmp_path / "tree"
    for directory in TREE_DIRECTORIES:
        (root / directory).mkdir(parents=True, exist_ok=True)

    for relative, size_bytes in TREE_FILES.items():
        write_file(root / relative, size_bytes)

    return root


@pytest.fixture
def wide_tree(tmp_path: Path) -> tuple[Path, int, int]:
    """A tree wide and deep enough to keep several workers busy."""
    root = tmp_path / "wide"
    total = 0
    count = 0

    for i in range(6):
        for j in range(4):
            for k in range(3):
                size_bytes = i * 100 + j * 10 + k + 1
                directory = root / f"d{i}" / f"e{j}" / f"f{k}"
                write_file(directory / f"file{k}.dat", size_bytes)
                total += size_bytes
                count += 1

        write_file(root / f"d{i}" / "top.txt", i)
        total += i
        count += 1

    return root, total, count
