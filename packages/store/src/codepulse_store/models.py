"""Review cache data models.

Decoupled from codepulse_core so the cache can be used independently; the
cached value is opaque to this package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CacheEntry:
    """A cached review result and the wall-clock time it was stored."""

    result: Any
    inserted_at: float  # seconds since the epoch


@dataclass
class CacheEntryInfo:
    hash_prefix: str
    inserted_at: int  # ms since the epoch
    age_ms: int


@dataclass
class CacheStats:
    size: int = 0
    entries: list[CacheEntryInfo] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "size": self.size,
            "entries": [
                {"hashPrefix": e.hash_prefix, "insertedAt": e.inserted_at, "ageMs": e.age_ms} for e in self.entries
            ],
        }
