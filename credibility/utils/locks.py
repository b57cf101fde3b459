import threading
from contextlib import contextmanager


class KeyedLocks:
    """One re-entrant lock per key, created on demand.

    Serializes recalculation of the same hash/record/user while letting
    different keys proceed in parallel. An entry lives only while some
    thread holds or waits on it, so the map stays as small as the set of
    keys currently in flight. Locks are per process.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, holders and waiters]
        self._locks = {}

    def _checkout(self, key):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key):
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, key):
        lock = self._checkout(key)
        try:
            with lock:
                yield
        finally:
            self._checkin(key)

    def __len__(self):
        with self._guard:
            return len(self._locks)
