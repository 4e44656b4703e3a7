"""
RESPONSIBILITIES
- Provide a thread-safe get-or-add cache that populates each key at most once.
PROCESS OVERVIEW
1. get_or_add() looks the key up without blocking when it is already populated.
2. Otherwise the guard lock hands out a per-key lock; the first caller runs the
   factory while holding it and later callers wait, then reuse the stored value.
3. A factory that raises leaves the key unpopulated so the next caller retries.
4. clear() starts a new generation; values computed by factories that began
   before the clear are returned to their caller but never stored.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Hashable, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class MemoCache(Generic[K, V]):
    """Memoizing mapping whose entries live until clear() is called."""

    def __init__(self) -> None:
        self._values: Dict[K, V] = {}
        self._key_locks: Dict[K, threading.Lock] = {}
        self._guard = threading.Lock()
        self._generation = 0

    def _acquire_key_lock(self, key: K) -> Tuple[threading.Lock, int]:
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock, self._generation

    def get_or_add(self, key: K, factory: Callable[[K], V]) -> V:
        """Return the cached value for ``key``, computing it with ``factory`` once."""

        try:
            return self._values[key]
        except KeyError:
            pass

        lock, generation = self._acquire_key_lock(key)
        with lock:
            if key in self._values:
                return self._values[key]
            value = factory(key)
            with self._guard:
                if self._generation == generation:
                    self._values[key] = value
            return value

    def clear(self) -> None:
        """Drop every entry; intended for process shutdown and test isolation."""

        with self._guard:
            self._generation += 1
            self._values.clear()
            self._key_locks.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)


__all__ = ["MemoCache"]
