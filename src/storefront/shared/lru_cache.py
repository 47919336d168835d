"""Fixed-capacity cache with least-recently-used eviction.

Used on the order read path so hot orders and customer order lists do
not hit the store of record on every lookup.  There is no TTL: entries
leave only by eviction or explicit invalidation, so every write path
that touches an order must invalidate the matching keys.

Readers that load from the store and then cache the result race with
writers that invalidate in between.  ``generation(key)`` is taken before
the load and ``put_if_generation`` refuses the write if an invalidation
for that key (or a ``clear``) happened since.
"""

from __future__ import annotations

from collections import OrderedDict
from threading import Lock
from typing import Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Thread-safe LRU cache.

    The underlying OrderedDict keeps keys from least to most recently
    used; every operation is O(1).
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._lock = Lock()
        # Invalidation stamps for the most recent ``capacity`` keys.  Keys
        # without a stamp report ``_floor``, which never drops below a
        # pruned stamp, so a generation can only move forward.
        self._clock = 0
        self._floor = 0
        self._stamps: OrderedDict[K, int] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: K) -> V | None:
        """Return the cached value and mark it most recently used."""
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key: K, value: V) -> None:
        """Insert or replace ``key``, evicting the LRU entry when full."""
        with self._lock:
            self._store(key, value)

    def generation(self, key: K) -> int:
        """Token to hand back to ``put_if_generation`` after a slow load."""
        with self._lock:
            return self._stamps.get(key, self._floor)

    def put_if_generation(self, key: K, value: V, generation: int) -> bool:
        """Cache ``value`` only if ``key`` was not invalidated since ``generation``."""
        with self._lock:
            if self._stamps.get(key, self._floor) != generation:
                return False
            self._store(key, value)
            return True

    def invalidate(self, key: K) -> bool:
        with self._lock:
            self._stamp(key)
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._stamps.clear()
            self._clock += 1
            self._floor = self._clock

    def keys(self) -> list[K]:
        """Keys ordered from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        # Membership checks do not count as use.
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # --- Internals (caller holds the lock) ------------------------------------

    def _store(self, key: K, value: V) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
            self._entries[key] = value
            return
        if len(self._entries) >= self._capacity:
            self._entries.popitem(last=False)
        self._entries[key] = value

    def _stamp(self, key: K) -> None:
        self._clock += 1
        self._stamps[key] = self._clock
        self._stamps.move_to_end(key)
        while len(self._stamps) > self._capacity:
            _, pruned = self._stamps.popitem(last=False)
            self._floor = max(self._floor, pruned)
