"""
Resolver settings.

Defaults match the two backend deployments; every value can be overridden
through RESOLVER_* environment variables (optionally from a .env file).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_LOCAL_BASE_URL = "http://localhost:5000"
DEFAULT_DEPLOYED_BASE_URL = "https://furniture-q3nb.onrender.com"
DEFAULT_CACHE_PATH = "data/product_cache.json"

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FetchPolicy:
    timeout: float = 10.0  # seconds per attempt
    max_retries: int = 0
    retry_delay: float = 1.0


@dataclass
class ResolverSettings:
    local_base_url: Optional[str] = DEFAULT_LOCAL_BASE_URL
    deployed_base_url: str = DEFAULT_DEPLOYED_BASE_URL
    skip_network: bool = False
    cache_path: Optional[Path] = Path(DEFAULT_CACHE_PATH)
    log_level: str = "INFO"
    direct: FetchPolicy = field(default_factory=lambda: FetchPolicy(10.0, 2, 1.0))
    reliable: FetchPolicy = field(default_factory=lambda: FetchPolicy(10.0, 1, 1.0))
    legacy: FetchPolicy = field(default_factory=lambda: FetchPolicy(10.0, 0))
    debug: FetchPolicy = field(default_factory=lambda: FetchPolicy(10.0, 0))
    last_resort: FetchPolicy = field(default_factory=lambda: FetchPolicy(60.0, 0))

    @classmethod
    def from_env(cls) -> "ResolverSettings":
        local = os.getenv("RESOLVER_LOCAL_BASE_URL", DEFAULT_LOCAL_BASE_URL).strip()
        cache_path = os.getenv("RESOLVER_CACHE_PATH", DEFAULT_CACHE_PATH).strip()
        return cls(
            local_base_url=local.rstrip("/") or None,
            deployed_base_url=os.getenv("RESOLVER_DEPLOYED_BASE_URL", DEFAULT_DEPLOYED_BASE_URL).strip().rstrip("/"),
            skip_network=os.getenv("RESOLVER_SKIP_NETWORK", "").strip().lower() in TRUTHY,
            cache_path=Path(cache_path) if cache_path else None,
            log_level=os.getenv("RESOLVER_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
