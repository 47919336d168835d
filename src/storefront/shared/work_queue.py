"""Unbounded FIFO used to hand work from request threads to a background consumer."""

from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Generic, TypeVar

T = TypeVar("T")


class WorkQueue(Generic[T]):
    """Thread-safe queue with no capacity limit and no backpressure.

    ``push`` never blocks.  Contents live in memory only and are lost if
    the process stops.
    """

    def __init__(self) -> None:
        self._items: deque[T] = deque()
        self._lock = Lock()

    def push(self, task: T) -> None:
        with self._lock:
            self._items.append(task)

    def pop(self) -> T | None:
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def peek(self) -> T | None:
        with self._lock:
            return self._items[0] if self._items else None

    def drain(self) -> list[T]:
        """Remove and return every queued task, oldest first."""
        with self._lock:
            tasks = list(self._items)
            self._items.clear()
            return tasks

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._items)

    def is_empty(self) -> bool:
        return self.size() == 0

    def __len__(self) -> int:
        return self.size()
