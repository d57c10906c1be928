"""
Fixed-delay retries for flaky backends.

Each endpoint family has a small retry budget (0-2 extra attempts) with the
same pause before every retry, so a slow cold-starting host gets a couple
of chances without stalling the whole fallback chain.
"""

import functools
import time
from typing import Callable, Optional, Tuple, Type

RETRYABLE_STATUSES = frozenset({408, 429})


class RetryError(Exception):
    """The retry budget ran out. The last failure is chained as __cause__."""

    def __init__(self, attempts: int, last_error: Exception):
        self.attempts = attempts
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")


def fixed_delay(
    max_retries: int = 2,
    delay: float = 1.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Retry the decorated call up to max_retries more times, waiting `delay`
    seconds before each retry.

    Only `exceptions` are retried; anything else propagates on the spot.
    on_retry(retry_number, error, delay) runs before each wait.

    Example:
        @fixed_delay(max_retries=1, delay=0.5, exceptions=(requests.Timeout,))
        def load(url):
            return session.get(url, timeout=10)
    """
    attempts = max_retries + 1

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            retries_used = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if retries_used >= max_retries:
                        raise RetryError(attempts, e) from e
                    retries_used += 1
                    if on_retry:
                        on_retry(retries_used, e, delay)
                    sleep(delay)

        return wrapper

    return decorator


def should_retry_http_status(status_code: int) -> bool:
    """Request timeout, rate limiting and any server error are worth another try."""
    return status_code in RETRYABLE_STATUSES or 500 <= status_code <= 599
