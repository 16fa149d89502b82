"""No-op cache, selected with ``cache: none``.

Every review goes to the LLM. Using a NoOpCache rather than None lets the
review engine always call lookup()/store() without conditional checks.
"""

from __future__ import annotations

from typing import Any, Optional

from codepulse_store.base import BaseCache
from codepulse_store.models import CacheStats


class NoOpCache(BaseCache):
    """Never hits, silently discards every result."""

    def lookup(self, key: str) -> Optional[Any]:
        return None

    def store(self, key: str, result: Any) -> None:
        pass  # intentional no-op

    def sweep(self) -> int:
        return 0

    def stats(self) -> CacheStats:
        return CacheStats()
