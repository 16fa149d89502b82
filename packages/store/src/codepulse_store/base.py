"""Abstract review-cache interface.

The review engine depends on BaseCache, not on a concrete backend, so the
in-memory cache can be swapped for the no-op cache (or a shared backend)
without touching the engine.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from codepulse_store.models import CacheStats


def compute_key(diff: str) -> str:
    """Content address of a review request: SHA-256 hex of the trimmed diff."""
    return hashlib.sha256(diff.strip().encode("utf-8")).hexdigest()


class BaseCache(ABC):
    """Content-addressed store of review results with TTL expiry."""

    # Exposed on the instance so callers that only hold a cache (the review
    # engine) derive keys exactly the way the cache expects them.
    key_for = staticmethod(compute_key)

    @abstractmethod
    def lookup(self, key: str) -> Optional[Any]:
        """Return the cached result for key, or None if absent or expired."""

    @abstractmethod
    def store(self, key: str, result: Any) -> None:
        """Insert or overwrite the entry for key, stamped with the current time."""

    @abstractmethod
    def sweep(self) -> int:
        """Remove every expired entry and return how many were removed."""

    @abstractmethod
    def stats(self) -> CacheStats:
        """Return a read-only snapshot of the cache contents."""

    def start(self) -> None:
        """Start any background maintenance. Default is a no-op."""

    def stop(self) -> None:
        """Stop background maintenance and release resources.

        Optional. Subclasses that run threads should override this.
        Default is a no-op so callers can always call stop() safely.
        """
