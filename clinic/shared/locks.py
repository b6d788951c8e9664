"""Per-key mutual exclusion for read-modify-write sections"""

from contextlib import contextmanager
from threading import Lock
from typing import Hashable, Iterator


class KeyedLocks:
    """
    Hand out one lock per key. Locks are dropped once no holder or waiter
    remains, so the registry does not grow with every key ever seen.
    """

    def __init__(self):
        self._guard = Lock()
        # Format: {key: [lock, holders_and_waiters]}
        self._locks: dict[Hashable, list] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [Lock(), 0])
            entry[1] += 1

        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
