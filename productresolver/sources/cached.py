from typing import Any, Optional

from ..cache import LocalCache
from ..errors import TransientSourceError
from .base import SourceAdapter


class CachedSource(SourceAdapter):
    persist = False

    def __init__(self, cache: LocalCache, label: str = "cache", degraded_reason: Optional[str] = None):
        self.cache = cache
        self.label = label
        self.degraded_reason = degraded_reason

    def fetch(self, entity_id: str) -> Any:
        # Stores are pluggable (file, SQLite, ...); any read failure only skips this source.
        try:
            record = self.cache.get(entity_id)
        except Exception as e:
            raise TransientSourceError(self.label, f"cache read failed: {e}") from e
        return record.entity.to_dict() if record is not None else None
