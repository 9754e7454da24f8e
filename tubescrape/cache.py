"""Short-lived in-process cache for scrape results."""

import itertools
import logging
import threading
import time
from typing import Callable

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class ResponseCache:
    """Maps query keys to results for a fixed TTL counted from insertion.

    Backed by a ``cachetools.TTLCache``: reads never extend an entry's life,
    and once ``max_entries`` is reached the least recently used entry makes
    room for the new one. Every put stores a new entry version; ``evict``
    only removes the version it was given, which keeps a stale eviction from
    dropping a newer entry under the same key.

    TTLCache is not thread-safe, so every access goes through one lock.
    """

    def __init__(
        self,
        ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10000,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._entries: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl, timer=clock)
        self._versions = itertools.count(1)
        self._lock = threading.Lock()

    def get(self, key: str):
        """Return the cached value for key, or None on a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._entries.expire()
                return None
        _, value = entry
        return list(value) if isinstance(value, tuple) else value

    def put(self, key: str, value) -> int:
        """Store value under key, replacing any prior entry. Returns the new version."""
        if isinstance(value, list):
            value = tuple(value)
        with self._lock:
            version = next(self._versions)
            self._entries[key] = (version, value)
        return version

    def evict(self, key: str, version: int) -> bool:
        """Remove key only if it still holds the given version."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[0] != version:
                return False
            del self._entries[key]
            logger.debug("Evicted cache entry %s (version %d)", key, version)
            return True

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
