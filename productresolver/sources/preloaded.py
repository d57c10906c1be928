from typing import Any

from .base import SourceAdapter


class PreloadedSource(SourceAdapter):
    """
    Data handed off from a previous render pass. Single use: the first
    access consumes it, whether or not it matches the requested id.
    """

    label = "preloaded"

    def __init__(self, payload: Any = None):
        self._payload = payload

    @property
    def available(self) -> bool:
        return self._payload is not None

    def fetch(self, entity_id: str) -> Any:
        payload, self._payload = self._payload, None
        return payload
