"""
In-memory cache with per-entry expiry

Owned by the caller and passed in explicitly; nothing here is module-level state.
Safe to share between the merger's worker threads.
"""
import threading
import time


class TTLCache:
    """
    Key/value cache whose entries expire after ttl_seconds

    Args:
        ttl_seconds: Lifetime of an entry
        clock: Callable returning the current time in seconds (injectable for tests)
    """

    def __init__(self, ttl_seconds=300.0, clock=time.monotonic):
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be non-negative, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key, default=None):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if self.clock() >= expires_at:
                self._entries.pop(key, None)
                return default
            return value

    def put(self, key, value):
        with self._lock:
            self._entries[key] = (self.clock() + self.ttl_seconds, value)

    def invalidate(self, key=None):
        """Drop one key, or everything when key is None"""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def clear(self):
        self.invalidate()

    def __contains__(self, key):
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self):
        with self._lock:
            now = self.clock()
            return sum(1 for expires_at, _ in self._entries.values() if now < expires_at)
