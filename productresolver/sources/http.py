from typing import Any
from urllib.parse import quote

from ..config import FetchPolicy
from ..fetcher import RetryingFetcher
from .base import SourceAdapter


class HttpSource(SourceAdapter):
    """An endpoint described by (label, URL template, fetch policy)."""

    def __init__(self, label: str, url_template: str, policy: FetchPolicy, fetcher: RetryingFetcher, fuzzy: bool = False):
        self.label = label
        self.url_template = url_template
        self.policy = policy
        self.fetcher = fetcher
        self.fuzzy = fuzzy

    def url_for(self, entity_id: str) -> str:
        return self.url_template.format(id=quote(entity_id, safe=""))

    def fetch(self, entity_id: str) -> Any:
        return self.fetcher.fetch(
            self.url_for(entity_id),
            timeout=self.policy.timeout,
            max_retries=self.policy.max_retries,
            retry_delay=self.policy.retry_delay,
        )
