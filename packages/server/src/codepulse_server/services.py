"""Wire core components and the cache together from a config dict.

This factory lives outside codepulse_core so the core has no knowledge of
codepulse_store; the server and the CLI both build through here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from codepulse_core.config import load_guidelines
from codepulse_core.cost import UsageAccountant
from codepulse_core.fixes.dependencies import DependencyAnalyzer
from codepulse_core.fixes.pipeline import FixPipeline
from codepulse_core.fixes.synthesizer import FixSynthesizer
from codepulse_core.gh.search import GitHubCodeSearch
from codepulse_core.providers.registry import get_provider
from codepulse_core.review import ReviewEngine
from codepulse_store.base import BaseCache


@dataclass
class Services:
    cache: BaseCache
    accountant: UsageAccountant
    engine: ReviewEngine
    pipeline: FixPipeline


def build_cache(config: dict) -> BaseCache:
    """Instantiate the configured cache.

      cache: memory → MemoryCache (default; TTL and sweep interval from config)
      cache: none   → NoOpCache   (every review calls the model)
    """
    cache_type = config.get("cache", "memory")
    if cache_type == "none":
        from codepulse_store.noop import NoOpCache

        return NoOpCache()
    if cache_type == "memory":
        from codepulse_store.memory import MemoryCache

        return MemoryCache(
            ttl_seconds=float(config.get("cache_ttl_hours", 24)) * 3600,
            sweep_interval_seconds=float(config.get("sweep_interval_minutes", 60)) * 60,
        )
    raise ValueError(f"Unknown cache type: {cache_type!r}. Choose 'memory' or 'none'.")


def build_services(config: dict, provider=None, search=None, cache: Optional[BaseCache] = None) -> Services:
    provider = provider if provider is not None else get_provider(config)
    search = search if search is not None else GitHubCodeSearch()
    cache = cache if cache is not None else build_cache(config)
    accountant = UsageAccountant()

    engine = ReviewEngine(
        provider,
        cache,
        accountant=accountant,
        guidelines=load_guidelines(config),
        max_tokens=config.get("review_max_tokens", 4096),
        max_diff_bytes=config.get("max_diff_bytes", 50 * 1024),
    )
    pipeline = FixPipeline(
        DependencyAnalyzer(search, max_workers=config.get("search_workers", 1)),
        FixSynthesizer(provider, max_tokens=config.get("fix_max_tokens", 8192)),
    )
    return Services(cache=cache, accountant=accountant, engine=engine, pipeline=pipeline)
