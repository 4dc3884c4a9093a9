"""Bounded directory-listing cache with TTL and LRU eviction."""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class DirEntry:
    """One directory entry: name and whether it is a directory."""
    name: str
    is_dir: bool


@dataclass
class CacheEntry:
    directory: str
    items: list[DirEntry]
    inserted_at: float


class DirectoryCache:
    """Most recent listing per directory.

    TTL expiry is checked lazily on ``get``; capacity is enforced eagerly on
    ``insert`` and ``update_limits``. Every operation holds one lock.

    Usage:
        cache = DirectoryCache(ttl=0.5, max_entries=64)
        items = cache.get("/proj")
        if items is None:
            items = read_dir("/proj")
            cache.insert("/proj", items)
    """

    def __init__(self, ttl: float, max_entries: int, clock: Callable[[], float] = time.monotonic):
        """Initialize the cache.

        Args:
            ttl: Seconds a listing stays valid
            max_entries: Maximum number of directories held
            clock: Time source, monotonic seconds
        """
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        # Least recently used first; the most recent entry sits at the end
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, directory: str) -> Optional[list[DirEntry]]:
        """Return a copy of the cached listing, or None if missing or stale."""
        key = str(directory)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at > self.ttl:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return list(entry.items)

    def insert(self, directory: str, items: list[DirEntry]) -> None:
        """Store ``items`` as the newest listing for ``directory``."""
        key = str(directory)
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key, list(items), self._clock())
            self._evict()

    def update_limits(self, ttl: float, max_entries: int) -> None:
        """Change TTL and capacity without clearing.

        Existing timestamps are kept, so entries older than a shorter TTL
        expire on their next read.
        """
        with self._lock:
            self.ttl = ttl
            self.max_entries = max_entries
            self._evict()

    def _evict(self) -> None:
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def directories(self) -> list[str]:
        """Cached directories, most recently used first."""
        with self._lock:
            return list(reversed(self._entries))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, directory: str) -> bool:
        with self._lock:
            return str(directory) in self._entries
