"""
Ordered list of sources tried for one product id.

Order is part of the contract:
preloaded -> cache (skip-network mode only) -> direct -> reliable ->
legacy -> debug -> last-resort deployed direct -> cache -> static -> synthetic
"""

from typing import List, Optional

from ..cache import LocalCache
from ..config import FetchPolicy, ResolverSettings
from ..fetcher import RetryingFetcher
from .base import SourceAdapter
from .cached import CachedSource
from .http import HttpSource
from .preloaded import PreloadedSource
from .static import StaticTableSource
from .synthetic import SyntheticSource

# (label prefix, fetch policy field, path template, fuzzy id match)
ENDPOINTS = [
    ("direct", "direct", "/api/direct-product/{id}", False),
    ("reliable", "reliable", "/api/reliable/products/{id}", False),
    ("legacy", "legacy", "/api/products/{id}", False),
    ("debug", "debug", "/api/debug/product/{id}", True),
    ("debug-product", "debug", "/api/debug-product/{id}", True),
]

CACHE_FALLBACK_REASON = "Showing a saved copy of this product; live data could not be loaded."


def deduplicate_sources(sources: List[HttpSource]) -> List[HttpSource]:
    """Drop sources whose URL template was already seen, preserving order."""
    seen = set()
    result = []
    for source in sources:
        if source.url_template not in seen:
            seen.add(source.url_template)
            result.append(source)
    return result


class SourceRegistry:
    def __init__(
        self,
        settings: ResolverSettings,
        fetcher: RetryingFetcher,
        cache: LocalCache,
        preloaded: Optional[PreloadedSource] = None,
        static: Optional[StaticTableSource] = None,
        synthetic: Optional[SyntheticSource] = None,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.preloaded = preloaded or PreloadedSource()
        self.cache_first = CachedSource(cache, label="cache")
        self.cache_fallback = CachedSource(cache, label="cache", degraded_reason=CACHE_FALLBACK_REASON)
        self.static = static or StaticTableSource()
        self.synthetic = synthetic or SyntheticSource()
        self.endpoints = self._build_endpoints()
        self.last_resort = HttpSource(
            "direct:deployed:last-resort",
            f"{settings.deployed_base_url}/api/direct-product/{{id}}",
            settings.last_resort,
            fetcher,
        )

    def _environments(self):
        envs = []
        if self.settings.local_base_url:
            envs.append(("local", self.settings.local_base_url))
        envs.append(("deployed", self.settings.deployed_base_url))
        return envs

    def _build_endpoints(self) -> List[HttpSource]:
        sources = []
        for prefix, policy_name, path, fuzzy in ENDPOINTS:
            policy: FetchPolicy = getattr(self.settings, policy_name)
            for env, base in self._environments():
                sources.append(HttpSource(f"{prefix}:{env}", f"{base}{path}", policy, self.fetcher, fuzzy=fuzzy))
        return deduplicate_sources(sources)

    def sources_for(self, entity_id: str, skip_network: Optional[bool] = None) -> List[SourceAdapter]:
        """Ordered adapters to try for entity_id."""
        if skip_network is None:
            skip_network = self.settings.skip_network

        sources: List[SourceAdapter] = []
        if self.preloaded.available:
            sources.append(self.preloaded)
        if skip_network:
            sources.append(self.cache_first)
        sources.extend(self.endpoints)
        sources.append(self.last_resort)
        if not skip_network:
            sources.append(self.cache_fallback)
        sources.append(self.static)
        sources.append(self.synthetic)
        return sources
