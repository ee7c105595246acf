from __future__ import annotations

import heapq
from typing import Iterator

DEFAULT_CAPACITY = 10


class _Entry:
    """Heap entry ordered by relevance, least relevant first."""

    __slots__ = ("size_bytes", "path")

    def __init__(self, size_bytes: int, path: str) -> None:
        self.size_bytes = size_bytes
        self.path = path

    def __lt__(self, other: _Entry) -> bool:
        # Among equal sizes the larger path is the less relevant one.
        return (self.size_bytes, other.path) < (other.size_bytes, self.path)


class LargestFiles:
    """
    Retain the K largest (size, path) pairs offered so far.

    Entries are kept in a min-heap so the least relevant entry is always at
    the top and a new offer costs O(log K). Equal sizes rank by path, the
    lexicographically smaller path first, so the retained set does not depend
    on the order of offers.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 0:
            raise ValueError(f"Capacity cannot be negative: {capacity}")

        self._capacity = capacity
        self._heap: list[_Entry] = []

    @property
    def capacity(self) -> int:
        """Return the maximum number of entries retained."""
        return self._capacity

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[tuple[int, str]]:
        return ((entry.size_bytes, entry.path) for entry in self._heap)

    def offer(self, path: str, size_bytes: int) -> None:
        """Retain the file if it is among the largest seen so far."""
        if not self._capacity:
            return

        entry = _Entry(size_bytes, path)

        if len(self._heap) < self._capacity:
            heapq.heappush(self._heap, entry)

        elif self._heap[0] < entry:
            heapq.heapreplace(self._heap, entry)

    def merge(self, other: LargestFiles) -> None:
        """Offer every entry of other into this tracker."""
        for size_bytes, path in other:
            self.offer(path, size_bytes)

    def snapshot(self) -> list[tuple[int, str]]:
        """Return the retained entries, largest first."""
        return sorted(self, key=_rank_key)


def _rank_key(item: tuple[int, str]) -> tuple[int, str]:
    size_bytes, path = item
    return -size_bytes, path
