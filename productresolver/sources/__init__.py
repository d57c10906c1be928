"""Source adapters: each one knows how to obtain a raw product payload from one origin."""

from .base import SourceAdapter
from .cached import CachedSource
from .http import HttpSource
from .preloaded import PreloadedSource
from .registry import SourceRegistry
from .static import StaticTableSource
from .synthetic import SyntheticFallbackBuilder, SyntheticSource

__all__ = [
    "SourceAdapter",
    "CachedSource",
    "HttpSource",
    "PreloadedSource",
    "SourceRegistry",
    "StaticTableSource",
    "SyntheticFallbackBuilder",
    "SyntheticSource",
]
