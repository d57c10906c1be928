from typing import Any, Optional


class SourceAdapter:
    """
    One way of obtaining a raw product payload.

    Attributes:
        label: Name reported to the caller and used in logs/metrics
        fuzzy: Accept candidates whose id contains (or is contained in) the requested id
        persist: Write a winning candidate to the local cache
        synthetic: Candidate is fabricated from the id alone
        degraded_reason: Reported through on_degraded when this source wins
    """

    label = "source"
    fuzzy = False
    persist = True
    synthetic = False
    degraded_reason: Optional[str] = None

    def fetch(self, entity_id: str) -> Any:
        """Return a raw payload, None when the source has nothing, or raise TransientSourceError."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label}>"
