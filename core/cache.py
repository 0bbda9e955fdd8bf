"""
In-memory TTL cache for environmental snapshots.

One instance is built at startup and handed to the aggregator. Entries
are replaced wholesale on recompute and are never invalidated early;
expired entries are pruned whenever a new one is written.
"""

import threading
import time
from typing import Callable, Dict, Optional
import logging

from core.models import CacheEntry, EnvironmentalSnapshot

log = logging.getLogger(__name__)


class SnapshotCache:
    """
    Process-wide snapshot cache keyed by rounded coordinate.

    Concurrent misses on the same key both fetch; the last write wins.
    """

    def __init__(
        self,
        ttl_seconds: float = 30 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[EnvironmentalSnapshot]:
        """Return the live snapshot for `key`, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        age = self._clock() - entry.created_at
        if age >= self.ttl_seconds:
            log.debug(f"Cache entry for {key} expired ({age:.0f}s old)")
            return None
        return entry.snapshot

    def set(self, key: str, snapshot: EnvironmentalSnapshot) -> None:
        """Store a snapshot, dropping any entries that have expired."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now - e.created_at >= self.ttl_seconds]
            for k in expired:
                del self._entries[k]
            self._entries[key] = CacheEntry(snapshot=snapshot, created_at=now)
        if expired:
            log.debug(f"Pruned {len(expired)} expired cache entries")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, float]:
        """Entry count and TTL, for the health surface."""
        return {
            "size": len(self),
            "ttl_minutes": self.ttl_seconds / 60,
        }
