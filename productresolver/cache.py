"""
Local cache of resolved products.

Records are never expired; each successful live resolution overwrites the
previous record for that id (last writer wins).
"""

import json
from datetime import datetime
from typing import Callable, Optional

from .logger import get_logger
from .normalize import EntityNormalizer
from .schema import CacheRecord, Entity
from .storage import KeyValueStore

logger = get_logger()

KEY_PREFIX = "product-cache:"


def cache_key(entity_id: str) -> str:
    return f"{KEY_PREFIX}{entity_id}"


class LocalCache:
    def __init__(
        self,
        store: KeyValueStore,
        normalizer: Optional[EntityNormalizer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.normalizer = normalizer or EntityNormalizer()
        self.clock = clock

    def put(self, entity: Entity) -> CacheRecord:
        record = CacheRecord(id=entity.id, entity=entity, cached_at=self.clock())
        self.store.set(cache_key(entity.id), json.dumps(record.to_dict(), ensure_ascii=False))
        logger.debug("Cached product", id=entity.id)
        return record

    def get(self, entity_id: str) -> Optional[CacheRecord]:
        """Return the cached record, or None if absent or unreadable."""
        raw = self.store.get(cache_key(entity_id))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            cached_at = datetime.fromisoformat(data["cachedAt"])
            entity = self.normalizer.normalize(data["entity"], entity_id)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable cache record", id=entity_id, error=str(e))
            return None
        if entity is None:
            logger.warning("Ignoring cache record without a product", id=entity_id)
            return None
        return CacheRecord(id=data.get("id", entity_id), entity=entity, cached_at=cached_at)

    def clear(self, entity_id: str) -> None:
        self.store.delete(cache_key(entity_id))
