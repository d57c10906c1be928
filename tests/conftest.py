"""
Pytest configuration and shared fixtures.
"""

import pytest
import requests
from typing import Any, Dict

from productresolver.cache import LocalCache
from productresolver.config import FetchPolicy, ResolverSettings
from productresolver.fetcher import RetryingFetcher
from productresolver.storage import MemoryStore

LOCAL = "http://local.test"
DEPLOYED = "https://deployed.test"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload: Any = None, status_code: int = 200, bad_json: bool = False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Routes URLs to canned results. A route value may be a FakeResponse,
    an exception instance (raised), a list (consumed one item per call),
    or a callable taking the URL.
    """

    def __init__(self, routes: Dict[str, Any] = None, default: Any = None):
        self.routes = dict(routes or {})
        self.default = default
        self.calls = []

    def get(self, url, timeout=None, headers=None):
        self.calls.append((url, timeout))
        result = self.routes.get(url, self.default)
        if isinstance(result, list):
            result = result.pop(0) if len(result) > 1 else result[0]
        if callable(result) and not isinstance(result, FakeResponse):
            result = result(url)
        if result is None:
            raise requests.exceptions.ConnectionError(f"Connection refused: {url}")
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def urls(self):
        return [u for u, _ in self.calls]


@pytest.fixture
def fast_settings() -> ResolverSettings:
    """Settings with test base URLs and no waiting between retries."""
    return ResolverSettings(
        local_base_url=LOCAL,
        deployed_base_url=DEPLOYED,
        cache_path=None,
        direct=FetchPolicy(10.0, 2, 0.0),
        reliable=FetchPolicy(10.0, 1, 0.0),
        legacy=FetchPolicy(10.0, 0, 0.0),
        debug=FetchPolicy(10.0, 0, 0.0),
        last_resort=FetchPolicy(60.0, 0, 0.0),
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache(memory_store) -> LocalCache:
    return LocalCache(memory_store)


@pytest.fixture
def offline_session() -> FakeSession:
    """Every request fails with a connection error."""
    return FakeSession()


@pytest.fixture
def make_fetcher():
    def _make(session):
        return RetryingFetcher(session=session, sleep=lambda seconds: None)
    return _make


@pytest.fixture
def sofa_payload() -> Dict[str, Any]:
    """A complete backend product in the standard envelope."""
    return {
        "success": True,
        "data": {
            "_id": "680dcd6207d80949f2c7f36e",
            "name": "Elegant Wooden Sofa",
            "description": "A beautiful wooden sofa.",
            "price": 24999,
            "discountPrice": 19999,
            "category": "680c9481ab11e96a288ef6d9",
            "stock": 15,
            "ratings": 4.7,
            "numReviews": 24,
            "images": ["https://img.test/sofa.jpg"],
            "specifications": [{"name": "Material", "value": "Sheesham Wood"}],
            "reviews": [{"user": "u1", "rating": 5, "comment": "Great"}],
        },
    }
