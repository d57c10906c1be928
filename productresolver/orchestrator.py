"""
Resolution orchestrator.

Tries sources strictly in registry order, one at a time, and delivers the
first candidate that normalizes and correlates with the requested id.

Each call to resolve() returns a ResolutionToken. Only the most recent
token is current; a resolution whose token has been superseded (by a newer
resolve() or by cancel()) stops at the next source boundary and never
invokes its callbacks.
"""

import dataclasses
from dataclasses import dataclass
from typing import Callable, List, Optional

from .cache import LocalCache
from .errors import TotalResolutionFailure, TransientSourceError, ValidationMismatch
from .logger import get_logger
from .normalize import EntityNormalizer, ids_correlate
from .schema import Entity, ResolutionAttempt
from .sources.base import SourceAdapter

logger = get_logger()


@dataclass
class ResolutionCallbacks:
    on_resolved: Callable[[Entity, str], None]
    on_degraded: Optional[Callable[[str], None]] = None
    on_failed: Optional[Callable[[str], None]] = None


class ResolutionToken:
    """Handle for one logical resolution."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        self.attempts: List[ResolutionAttempt] = []
        self.source_label: Optional[str] = None
        self.delivered = False

    def __repr__(self) -> str:
        return f"<ResolutionToken {self.entity_id} delivered={self.delivered}>"


class ResolutionOrchestrator:
    def __init__(self, registry, cache: LocalCache, normalizer: Optional[EntityNormalizer] = None):
        """
        Args:
            registry: Object with sources_for(entity_id) -> ordered source adapters
            cache: Local cache written after every live win
            normalizer: Payload normalizer (default EntityNormalizer())
        """
        self.registry = registry
        self.cache = cache
        self.normalizer = normalizer or EntityNormalizer()
        self._current: Optional[ResolutionToken] = None

    def is_current(self, token: ResolutionToken) -> bool:
        return token is self._current

    def cancel(self) -> None:
        """Invalidate the in-flight resolution, if any."""
        if self._current is not None and not self._current.delivered:
            logger.debug("Resolution cancelled", id=self._current.entity_id)
        self._current = None

    def resolve(self, entity_id: str, callbacks: ResolutionCallbacks) -> Optional[ResolutionToken]:
        """
        Resolve entity_id and invoke exactly one terminal callback.

        Returns:
            The token for this resolution, or None when entity_id is empty
        """
        if not isinstance(entity_id, str) or not entity_id.strip():
            logger.warning("Refusing to resolve empty product id")
            return None

        entity_id = entity_id.strip()
        token = ResolutionToken(entity_id)
        self._current = token
        logger.record_resolution("requested")
        logger.info("Resolving product", id=entity_id)

        for source in self.registry.sources_for(entity_id):
            if not self.is_current(token):
                return self._drop(token)

            entity = self._try_source(token, source)
            if entity is None:
                continue

            if not self.is_current(token):
                return self._drop(token)

            if source.persist:
                try:
                    self.cache.put(entity)
                except Exception as e:
                    logger.error("Failed to cache product", id=entity_id, source=source.label, error=str(e))

            self._deliver(token, callbacks, entity, source)
            return token

        if not self.is_current(token):
            return self._drop(token)
        failure = TotalResolutionFailure(entity_id, "no source produced a product")
        logger.record_resolution("failed")
        logger.error("Resolution failed", id=entity_id, attempts=len(token.attempts))
        if callbacks.on_failed:
            callbacks.on_failed(str(failure))
        return token

    def _try_source(self, token: ResolutionToken, source: SourceAdapter) -> Optional[Entity]:
        entity_id = token.entity_id
        attempt = ResolutionAttempt(source.label)
        token.attempts.append(attempt)
        logger.record_source_attempt(source.label)

        try:
            attempt.raw_payload = source.fetch(entity_id)
        except TransientSourceError as e:
            attempt.error = str(e)
            logger.record_source_failure(source.label, "TransientSourceError")
            logger.warning("Source failed", id=entity_id, source=source.label, error=e.reason, target=e.label)
            return None

        if attempt.raw_payload is None:
            attempt.error = "no data"
            logger.debug("Source has no data", id=entity_id, source=source.label)
            return None

        entity = self.normalizer.normalize(attempt.raw_payload, entity_id)
        if entity is None:
            attempt.error = "unrecognized payload"
            logger.record_source_failure(source.label, "UnrecognizedPayload")
            logger.warning("Source returned no recognizable product", id=entity_id, source=source.label)
            return None

        if not ids_correlate(entity_id, entity.id, fuzzy=source.fuzzy):
            mismatch = ValidationMismatch(entity_id, entity.id)
            attempt.error = str(mismatch)
            logger.record_source_failure(source.label, "ValidationMismatch")
            logger.info("Discarding mismatched candidate", source=source.label, error=str(mismatch))
            return None

        if entity.id != entity_id:
            entity = dataclasses.replace(entity, id=entity_id)

        logger.record_source_success(source.label)
        return entity

    def _deliver(self, token, callbacks: ResolutionCallbacks, entity: Entity, source: SourceAdapter) -> None:
        token.delivered = True
        token.source_label = source.label
        logger.record_resolution("delivered")
        logger.info("Resolved product", id=entity.id, source=source.label, attempts=len(token.attempts))

        callbacks.on_resolved(entity, source.label)

        if source.degraded_reason and self.is_current(token):
            logger.record_resolution("degraded")
            logger.warning("Degraded resolution", id=entity.id, source=source.label)
            if callbacks.on_degraded:
                callbacks.on_degraded(source.degraded_reason)

    def _drop(self, token: ResolutionToken) -> ResolutionToken:
        logger.record_resolution("cancelled")
        logger.debug("Dropping superseded resolution", id=token.entity_id, attempts=len(token.attempts))
        return token
