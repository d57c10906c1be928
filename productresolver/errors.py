"""
Error taxonomy for product resolution.

Per-source errors are absorbed by the orchestrator and only advance the
source list. TotalResolutionFailure is the one error a caller can observe.
"""


class ResolverError(Exception):
    """Base class for resolution errors."""
    pass


class TransientSourceError(ResolverError):
    """A source produced nothing (timeout, network failure, non-2xx, bad JSON)."""

    def __init__(self, label: str, reason: str):
        self.label = label
        self.reason = reason
        super().__init__(f"{label}: {reason}")


class ValidationMismatch(ResolverError):
    """A normalized candidate does not correlate with the requested id."""

    def __init__(self, requested_id: str, candidate_id: str):
        self.requested_id = requested_id
        self.candidate_id = candidate_id
        super().__init__(
            f"Candidate id '{candidate_id}' does not match requested id '{requested_id}'"
        )


class TotalResolutionFailure(ResolverError):
    """Nothing at all could be produced for an id, not even a placeholder."""

    def __init__(self, entity_id: str, reason: str):
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Could not resolve '{entity_id}': {reason}")
