"""USD cost accounting for LLM calls."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from codepulse_core.models import ReviewResult

# Claude Sonnet list pricing: $3 per 1M input tokens, $15 per 1M output tokens.
INPUT_RATE = 3 / 1_000_000
OUTPUT_RATE = 15 / 1_000_000

_COST_DECIMALS = 5


def compute_cost(input_tokens: int, output_tokens: int) -> float:
    """Return the USD cost of a call, rounded to 5 decimal places."""
    return round(input_tokens * INPUT_RATE + output_tokens * OUTPUT_RATE, _COST_DECIMALS)


@dataclass
class UsageMetrics:
    review_count: int = 0
    total_cost: float = 0.0
    average_cost: float = 0.0
    total_tokens: int = 0
    cache_hit_rate: int = 0  # percent

    def to_dict(self) -> dict:
        return {
            "reviewCount": self.review_count,
            "totalCost": self.total_cost,
            "averageCost": self.average_cost,
            "totalTokens": self.total_tokens,
            "cacheHitRate": self.cache_hit_rate,
        }


class UsageAccountant:
    """Running totals across every review served by this process.

    Cache hits count toward the totals with the cost of the original call,
    the same way the dashboard reports them.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reviews = 0
        self._cache_hits = 0
        self._cost = 0.0
        self._tokens = 0

    def record(self, result: ReviewResult) -> None:
        with self._lock:
            self._reviews += 1
            self._cost += result.cost
            self._tokens += result.tokens_used.total
            if result.cached:
                self._cache_hits += 1

    def snapshot(self) -> UsageMetrics:
        with self._lock:
            if not self._reviews:
                return UsageMetrics(total_tokens=self._tokens)
            return UsageMetrics(
                review_count=self._reviews,
                total_cost=round(self._cost, _COST_DECIMALS),
                average_cost=round(self._cost / self._reviews, _COST_DECIMALS),
                total_tokens=self._tokens,
                cache_hit_rate=round(self._cache_hits / self._reviews * 100),
            )
