"""MemoryCache: in-process review cache with TTL expiry.

Entries live only for the lifetime of the process. Expiry is enforced twice:
lazily, when lookup() finds a stale entry, and periodically, by a sweeper
thread that scans the whole map. The sweeper is owned by the cache and only
runs between start() and stop().

There is no per-key locking: two concurrent misses for the same key both
reach the LLM and the later store() wins.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from codepulse_store.base import BaseCache
from codepulse_store.models import CacheEntry, CacheEntryInfo, CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60

_HASH_PREFIX_LEN = 8


class MemoryCache(BaseCache):
    """Lock-guarded dict of CacheEntry keyed by content hash.

    ``clock`` returns wall-clock seconds and is injectable so tests can move
    time forward without sleeping.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._ttl = ttl_seconds
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at >= self._ttl

    def lookup(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                logger.debug("Evicted expired entry %s on lookup", key[:_HASH_PREFIX_LEN])
                return None
            return entry.result

    def store(self, key: str, result: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(result=result, inserted_at=self._clock())

    def sweep(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if self._expired(entry, now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.info("Cache sweep removed %d expired entr%s", len(stale), "y" if len(stale) == 1 else "ies")
        return len(stale)

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            entries = [
                CacheEntryInfo(
                    hash_prefix=key[:_HASH_PREFIX_LEN],
                    inserted_at=int(entry.inserted_at * 1000),
                    age_ms=int((now - entry.inserted_at) * 1000),
                )
                for key, entry in self._entries.items()
            ]
        return CacheStats(size=len(entries), entries=entries)

    # ------------------------------------------------------------------ #
    # Sweeper lifecycle                                                    #
    # ------------------------------------------------------------------ #

    def start(self) -> None:
        """Start the background sweeper. Calling start() twice is harmless."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop_event.clear()
        self._sweeper = threading.Thread(target=self._run_sweeper, name="codepulse-cache-sweeper", daemon=True)
        self._sweeper.start()
        logger.debug("Cache sweeper started (interval %ss, ttl %ss)", self._sweep_interval, self._ttl)

    def stop(self) -> None:
        self._stop_event.set()
        if self._sweeper is not None:
            self._sweeper.join()
            self._sweeper = None

    @property
    def running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()

    def _run_sweeper(self) -> None:
        while not self._stop_event.wait(self._sweep_interval):
            try:
                self.sweep()
            except Exception:
                logger.exception("Cache sweep failed")
