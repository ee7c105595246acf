from __future__ import annotations

import logging
import queue
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType


class QueueClosed(Exception):
    """The queue is drained and no more work can arrive."""


class WorkQueue:
    """
    Unbounded multi-producer, multi-consumer queue of directories to scan.

    The queue counts pending items, queued or being scanned, and open
    producer handles. It is drained once both counts are zero: nothing is
    waiting, no worker is still scanning something that could yield more
    directories, and nobody outside the workers can add any.

    Workers follow one rule: put the children of an item before calling
    task_done() for it. The pending count then never touches zero while
    more work is still possible.

    Usage:

        with work_queue.open_producer() as producer:
            producer.put(root)

        while True:
            try:
                path = work_queue.get()
            except queue.Empty:
                continue
            except QueueClosed:
                break
            ...
            work_queue.task_done()
    """

    logger = logging.getLogger(__name__)

    def __init__(self, poll_interval: float = 0.05) -> None:
        """
        Args:
            poll_interval: Seconds get() waits for an item before giving the
                caller a chance to check for completion.
        """
        self._queue: queue.Queue[str] = queue.Queue()
        self._lock = threading.Lock()
        self._poll_interval = poll_interval
        self._pending = 0
        self._producers = 0

    def open_producer(self) -> Producer:
        """Return a new producer handle. The queue stays open until it closes."""
        with self._lock:
            self._producers += 1

        return Producer(self)

    def put(self, path: str) -> None:
        """Queue a directory."""
        with self._lock:
            self._pending += 1

        self._queue.put(path)

    def get(self) -> str:
        """
        Wait up to the poll interval for the next directory.

        Raises:
            queue.Empty: Nothing arrived yet but more work may still come.
            QueueClosed: The queue is drained.
        """
        try:
            return self._queue.get(timeout=self._poll_interval)

        except queue.Empty:
            if self.drained:
                raise QueueClosed() from None
            raise

    def task_done(self) -> None:
        """Mark a directory returned by get() as fully processed."""
        with self._lock:
            if self._pending <= 0:
                raise ValueError("task_done() called too many times")

            self._pending -= 1

    @property
    def drained(self) -> bool:
        """True if nothing is pending and every producer has closed."""
        with self._lock:
            return not self._pending and not self._producers

    @property
    def pending(self) -> int:
        """Return the number of directories queued or being scanned."""
        with self._lock:
            return self._pending

    def _release_producer(self) -> None:
        with self._lock:
            self._producers -= 1
            remaining = self._producers

        self.logger.debug("Producer closed, %s remaining", remaining)


class Producer:
    """A handle that keeps a WorkQueue open while it is held."""

    def __init__(self, work_queue: WorkQueue) -> None:
        self._work_queue = work_queue
        self._closed = False

    def __enter__(self) -> Producer:
        """Enter a context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Exit a context manager, closing the handle."""
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, path: str) -> None:
        """
        Queue a directory.

        Raises:
            QueueClosed: This handle was already closed.
        """
        if self._closed:
            raise QueueClosed("Cannot put on a closed producer")

        self._work_queue.put(path)

    def close(self) -> None:
        """Close the handle. Closing twice does nothing."""
        if self._closed:
            return

        self._closed = True
        self._work_queue._release_producer()
