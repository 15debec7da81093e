"""Per-key critical sections for borrow and return."""

import threading
from contextlib import contextmanager
from typing import Generator, Hashable


class KeyedLock:
    """A family of mutexes, one per key.

    Callers holding different keys never block each other. Locks are
    created on first use and dropped once no thread holds or waits on them,
    so the table stays as small as the set of keys currently in use.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Generator[None, None, None]:
        """Block until ``key`` is free, then hold it for the with-block."""
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
